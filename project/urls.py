from django.contrib import admin
from django.urls import path, include
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/token/', TokenObtainPairView.as_view(), name='token-obtain-pair'),
    path('api/token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),
    path('api/catalog/', include('catalog.api.urls')),
    path('api/inquiries/', include('inquiries.api.urls')),
    path('api/negotiation/', include('negotiation.api.urls')),
]
