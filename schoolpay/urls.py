"""
URL configuration for schoolpay project.

Each app exposes its JSON endpoints under its own prefix and namespace.
"""
from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

urlpatterns = [
    # Django admin
    path('admin/', admin.site.urls),

    # Accounts app - users and profiles
    path('accounts/', include(('accounts.urls', 'accounts'), namespace='accounts')),

    # Academics app - classes
    path('academics/', include(('academics.urls', 'academics'), namespace='academics')),

    # Students app
    path('students/', include(('students.urls', 'students'), namespace='students')),

    # Fees app - bills and payments
    path('fees/', include(('fees.urls', 'fees'), namespace='fees')),

    # Savings app - student savings ledger
    path('savings/', include(('savings.urls', 'savings'), namespace='savings')),

    # Finance app - other income, expenses, reports
    path('finance/', include(('finance.urls', 'finance'), namespace='finance')),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
