"""
URL configuration for the HOS Trip Planner project.

API URL structure:
- /api/ - API root
- /api/health/ - Health check
- /api/routes/ - Route calculation service
- /api/trips/ - Trip planning and storage
- /api/eld/ - ELD log generation and validation
- /api/config/ - HOS configuration
"""

from django.contrib import admin
from django.urls import path, include
from planner.views import (
    HealthCheckView,
    api_root,
    # Route Service
    RouteCalculateView,
    # ELD Service
    ELDGenerateView,
    ELDValidateView,
    # HOS Config
    HOSConfigView,
)

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # API root - Documentation
    path('api/', api_root, name='api_root'),

    # Health check endpoint
    path('api/health/', HealthCheckView.as_view(), name='health_check'),

    # ==========================================================================
    # Route Service
    # ==========================================================================
    path('api/routes/calculate', RouteCalculateView.as_view(), name='route_calculate'),

    # ==========================================================================
    # Trip Planning - Uses planner app urls
    # ==========================================================================
    path('api/trips/', include('planner.urls', namespace='planner')),

    # ==========================================================================
    # ELD Log Generation & Validation
    # ==========================================================================
    path('api/eld/generate', ELDGenerateView.as_view(), name='eld_generate'),
    path('api/eld/validate', ELDValidateView.as_view(), name='eld_validate'),

    # ==========================================================================
    # HOS Configuration Service
    # ==========================================================================
    path('api/config/hos', HOSConfigView.as_view(), name='config_hos'),
]
