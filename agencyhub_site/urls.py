from django.contrib import admin
from django.contrib.auth import views as auth_views
from django.urls import path, include

from finance.views import healthz

urlpatterns = [
    path("api/", include("finance.urls")),
    path("site-admin/", admin.site.urls),
    path("accounts/login/", auth_views.LoginView.as_view(template_name="admin/login.html"), name="login"),
    path("accounts/logout/", auth_views.LogoutView.as_view(), name="logout"),
    path("healthz", healthz, name="healthz"),
]
