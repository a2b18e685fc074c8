from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

urlpatterns = [
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/v1/doc/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/v1/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
    path('admin/', admin.site.urls),
    path('api/v1/auth/', include('user.urls')),
    path('api/v1/organisation/', include('organisation.urls')),
    path('api/v1/categories/', include('category.urls')),
    path('api/v1/expenses/', include('expense.urls')),
] + static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
