from django.urls import path

from .views import (
    OrderListCreateView,
    FarmOrderListView,
    OrderDetailView,
    OrderStatusUpdateView,
    OrderCancelView,
    OrderReviewView,
)

app_name = 'orders'

urlpatterns = [
    path('', OrderListCreateView.as_view(), name='order-list'),
    path('farm/', FarmOrderListView.as_view(), name='farm-order-list'),
    path('<uuid:pk>/', OrderDetailView.as_view(), name='order-detail'),
    path('<uuid:pk>/status/', OrderStatusUpdateView.as_view(), name='order-status'),
    path('<uuid:pk>/cancel/', OrderCancelView.as_view(), name='order-cancel'),
    path('<uuid:pk>/review/', OrderReviewView.as_view(), name='order-review'),
]
