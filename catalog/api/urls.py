from django.urls import path
from catalog.api import views

urlpatterns = [
    path('items/', views.CatalogItemListView.as_view(), name='catalog-item-list'),
    path('items/<int:pk>/', views.CatalogItemDetailView.as_view(), name='catalog-item-detail'),
]
