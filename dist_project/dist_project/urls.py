from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/accounting/", include("accounting.urls")),
    path("api/distributor/", include("applications.urls")),
]
