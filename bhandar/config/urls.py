"""
URL configuration for the Bhandar IMS backend.

Every app mounts its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Bhandar IMS Admin Panel"
admin.site.site_title = "Bhandar IMS Admin Portal"
admin.site.index_title = "Welcome to Bhandar IMS Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('bhandar.core.urls')),
    path('api/v1/', include('bhandar.locations.urls')),
    path('api/v1/', include('bhandar.catalog.urls')),
    path('api/v1/', include('bhandar.inventory.urls')),
    path('api/v1/', include('bhandar.sales.urls')),
    path('api/v1/', include('bhandar.production.urls')),
    path('api/v1/', include('bhandar.recalibration.urls')),
    path('api/v1/', include('bhandar.hr.urls')),
    path('api/v1/', include('bhandar.notifications.urls')),
    path('api/v1/', include('bhandar.reports.urls')),
]
