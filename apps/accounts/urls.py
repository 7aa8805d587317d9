# accounts/urls.py

from django.urls import path
from . import ajax_views

app_name = 'accounts'

urlpatterns = [
    path('users/', ajax_views.user_list, name='user_list'),
    path('users/create/', ajax_views.create_user, name='create_user'),
]
