from django.urls import path

from .views import (
    ProductListView,
    ProductDetailView,
    CultivarListView,
    CultivarDetailView,
    FarmProductListCreateView,
    FarmProductDetailView,
    FarmProductActivateView,
)

app_name = 'catalog'

urlpatterns = [
    # Public catalog
    path('products/', ProductListView.as_view(), name='product-list'),
    path('products/<uuid:pk>/', ProductDetailView.as_view(), name='product-detail'),
    path('cultivars/', CultivarListView.as_view(), name='cultivar-list'),
    path('cultivars/<slug:slug>/', CultivarDetailView.as_view(), name='cultivar-detail'),

    # Farm product management
    path('manage/products/', FarmProductListCreateView.as_view(), name='manage-product-list'),
    path('manage/products/<uuid:pk>/', FarmProductDetailView.as_view(), name='manage-product-detail'),
    path('manage/products/<uuid:pk>/activate/', FarmProductActivateView.as_view(), name='manage-product-activate'),
]
