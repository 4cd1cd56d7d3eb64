"""
URL configuration for core project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include
from django.views.generic import RedirectView

urlpatterns = [
    path('', RedirectView.as_view(url='/admin/', permanent=False)),
    path('admin/', admin.site.urls),
    path('api/auth/', include('accounts.urls')),
    path('api/farms/', include('farms.urls')),  # Farm directory, upgrade requests
    path('api/catalog/', include('catalog.urls')),  # Public catalog + farm product management
    path('api/orders/', include('orders.urls')),  # Order lifecycle and reviews
    path('api/notifications/', include('notifications.urls')),  # In-app notification feed
]
