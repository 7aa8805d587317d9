# accounts/ajax_views.py

from django.contrib.auth.decorators import login_required
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST
from django.http import JsonResponse
import logging

from core.utils import json_endpoint, json_error, parse_json_body, form_errors
from .forms import UserCreateForm
from .models import UserProfile
from .services import UserService

logger = logging.getLogger(__name__)


def serialize_user(user):
    profile = getattr(user, 'profile', None)
    return {
        'id': user.pk,
        'email': user.email,
        'full_name': profile.full_name if profile else user.get_full_name(),
        'role': profile.role if profile else None,
        'phone_number': profile.phone_number if profile else None,
        'is_active': user.is_active,
        'created_at': user.date_joined,
    }


# =============================================================================
# USERS
# =============================================================================

@csrf_exempt
@login_required
@require_POST
@json_endpoint
def create_user(request):
    """
    AJAX endpoint to create an administrator or parent account
    """
    form = UserCreateForm(parse_json_body(request))
    if not form.is_valid():
        return json_error("Invalid data.", status=400, error='validation_error', errors=form_errors(form))

    data = form.cleaned_data
    user = UserService.create_user(
        email=data['email'],
        password=data['password'],
        full_name=data['full_name'],
        role=data['role'],
        is_active=data['is_active'],
        phone_number=data.get('phone_number'),
    )
    return JsonResponse(
        {"success": True, "message": "User created successfully", "user": serialize_user(user)},
        status=201
    )


@login_required
@require_GET
@json_endpoint
def user_list(request):
    role = request.GET.get('role', '').strip().upper() or None
    if role and role not in dict(UserProfile.USER_ROLES):
        return json_error(f"Unknown role '{role}'.", status=400, error='validation_error')

    users = [serialize_user(user) for user in UserService.get_users(role=role)]
    return JsonResponse({"success": True, "count": len(users), "users": users})
