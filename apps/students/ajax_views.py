# students/ajax_views.py

from django.contrib.auth.decorators import login_required
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST
from django.http import JsonResponse
import logging

from core.utils import json_endpoint, json_error, parse_json_body, form_errors
from .forms import StudentForm
from .services import StudentService

logger = logging.getLogger(__name__)


def serialize_student(student):
    return {
        'id': str(student.id),
        'admission_number': student.admission_number,
        'full_name': student.full_name,
        'date_of_birth': student.date_of_birth,
        'parent_id': student.parent_id,
        'class_id': str(student.student_class_id),
        'class_name': student.student_class.name,
        'enrollment_date': student.enrollment_date,
        'is_active': student.is_active,
        'created_at': student.created_at,
    }


# =============================================================================
# STUDENT REGISTRATION
# =============================================================================

@csrf_exempt
@login_required
@require_POST
@json_endpoint
def create_student(request):
    """
    AJAX endpoint to register a student under a parent and class
    """
    form = StudentForm(parse_json_body(request))
    if not form.is_valid():
        return json_error("Invalid data.", status=400, error='validation_error', errors=form_errors(form))

    student = StudentService.create_student(**form.cleaned_data)
    return JsonResponse(
        {"success": True, "message": "Student created successfully", "student": serialize_student(student)},
        status=201
    )


# =============================================================================
# STUDENT LISTS
# =============================================================================

@login_required
@require_GET
@json_endpoint
def student_list(request):
    students = [serialize_student(s) for s in StudentService.get_all_students()]
    return JsonResponse({"success": True, "count": len(students), "students": students})


@login_required
@require_GET
@json_endpoint
def students_by_parent(request, parent_id):
    students = [serialize_student(s) for s in StudentService.get_students_by_parent(parent_id)]
    return JsonResponse({"success": True, "count": len(students), "students": students})
