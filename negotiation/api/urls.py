from django.urls import path
from negotiation.api import views

urlpatterns = [
    # Versions
    path('inquiries/<int:inquiry_id>/versions/', views.VersionListCreateView.as_view(), name='version-list'),
    path('inquiries/<int:inquiry_id>/versions/<int:version_number>/', views.VersionDetailView.as_view(), name='version-detail'),

    # Responses
    path('versions/<int:version_id>/customer-response/', views.CustomerResponseView.as_view(), name='customer-response'),
    path('versions/<int:version_id>/responses/', views.QuotationResponseListCreateView.as_view(), name='quotation-response-list'),
    path('responses/<int:response_id>/', views.QuotationResponseDetailView.as_view(), name='quotation-response-detail'),

    # SKU history
    path('inquiries/<int:inquiry_id>/sku-changes/', views.SkuChangeCreateView.as_view(), name='sku-change-create'),
    path('inquiries/<int:inquiry_id>/sku-history/', views.SkuHistoryListView.as_view(), name='sku-history'),

    # Ledger
    path('inquiries/<int:inquiry_id>/ledger/', views.NegotiationLedgerView.as_view(), name='negotiation-ledger'),
    path('inquiries/<int:inquiry_id>/summary/', views.NegotiationSummaryView.as_view(), name='negotiation-summary'),

    # Communications
    path('inquiries/<int:inquiry_id>/communications/', views.CommunicationListCreateView.as_view(), name='communication-list'),
    path('communications/<int:communication_id>/follow-up/complete/', views.FollowUpCompleteView.as_view(), name='follow-up-complete'),
]
