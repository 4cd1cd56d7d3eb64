from django.urls import path

from .views import (
    MyFarmView,
    FarmDashboardView,
    FarmDetailView,
    FarmVerifyView,
    UpgradeRequestListCreateView,
    UpgradeRequestReviewView,
)

app_name = 'farms'

urlpatterns = [
    # Own farm
    path('me/', MyFarmView.as_view(), name='my-farm'),
    path('me/dashboard/', FarmDashboardView.as_view(), name='my-farm-dashboard'),

    # Upgrade requests
    path('upgrade-requests/', UpgradeRequestListCreateView.as_view(), name='upgrade-request-list'),
    path('upgrade-requests/<uuid:pk>/review/', UpgradeRequestReviewView.as_view(), name='upgrade-request-review'),

    # Public directory
    path('<uuid:pk>/', FarmDetailView.as_view(), name='farm-detail'),
    path('<uuid:pk>/verify/', FarmVerifyView.as_view(), name='farm-verify'),
]
