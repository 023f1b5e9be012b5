# config/urls.py

from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # Apps
    path('', include('apps.core.urls')),
    path('board/', include('apps.board.urls')),
]

# Admin titles
admin.site.site_header = 'Taskboard Admin'
admin.site.site_title = 'Taskboard'
admin.site.index_title = 'Administration'
