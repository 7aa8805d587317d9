# academics/urls.py

from django.urls import path
from . import ajax_views

app_name = 'academics'

urlpatterns = [
    path('classes/', ajax_views.class_list, name='class_list'),
    path('classes/create/', ajax_views.create_class, name='create_class'),
]
