from django.urls import path
from inquiries.api import views

urlpatterns = [
    path('', views.InquiryListCreateView.as_view(), name='inquiry-list'),
    path('<int:pk>/', views.InquiryDetailView.as_view(), name='inquiry-detail'),
    path('<int:pk>/status/', views.InquiryStatusView.as_view(), name='inquiry-status'),
]
