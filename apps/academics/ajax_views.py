# academics/ajax_views.py

from django.contrib.auth.decorators import login_required
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST
from django.http import JsonResponse
import logging

from core.utils import json_endpoint, json_error, parse_json_body, form_errors
from .forms import ClassForm
from .services import ClassService

logger = logging.getLogger(__name__)


def serialize_class(class_instance):
    return {
        'id': str(class_instance.id),
        'name': class_instance.name,
        'description': class_instance.description,
        'monthly_fee': class_instance.monthly_fee,
        'is_active': class_instance.is_active,
        'created_at': class_instance.created_at,
    }


# =============================================================================
# CLASSES
# =============================================================================

@csrf_exempt
@login_required
@require_POST
@json_endpoint
def create_class(request):
    form = ClassForm(parse_json_body(request))
    if not form.is_valid():
        return json_error("Invalid data.", status=400, error='validation_error', errors=form_errors(form))

    data = form.cleaned_data
    class_instance = ClassService.create_class(
        name=data['name'],
        monthly_fee=data['monthly_fee'],
        description=data.get('description'),
        is_active=data['is_active'],
    )
    return JsonResponse(
        {"success": True, "message": "Class created successfully", "class": serialize_class(class_instance)},
        status=201
    )


@login_required
@require_GET
@json_endpoint
def class_list(request):
    """
    AJAX view returning active classes (all with ?include_inactive=1)
    """
    include_inactive = request.GET.get('include_inactive') in ('1', 'true', 'yes')
    classes = [serialize_class(c) for c in ClassService.get_classes(include_inactive=include_inactive)]
    return JsonResponse({"success": True, "count": len(classes), "classes": classes})
