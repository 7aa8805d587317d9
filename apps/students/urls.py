# students/urls.py

from django.urls import path
from . import ajax_views

app_name = 'students'

urlpatterns = [
    path('', ajax_views.student_list, name='student_list'),
    path('create/', ajax_views.create_student, name='create_student'),
    path('parent/<int:parent_id>/', ajax_views.students_by_parent, name='students_by_parent'),
]
