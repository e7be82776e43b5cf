# hafalantracker/urls.py
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    # Hafalan engine JSON API
    path('api/', include(('apps.hafalan.urls', 'hafalan'), namespace='hafalan')),
]
