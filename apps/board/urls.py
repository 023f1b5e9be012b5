# apps/board/urls.py

from django.urls import path
from . import views

app_name = 'board'

urlpatterns = [
    # Boards
    path('api/boards/', views.boards, name='boards'),
    path('api/boards/<uuid:board_id>/', views.board_detail, name='board_detail'),

    # Lists
    path('api/boards/<uuid:board_id>/lists/', views.list_create, name='list_create'),
    path('api/boards/<uuid:board_id>/lists/<uuid:list_id>/', views.list_detail, name='list_detail'),

    # Tasks (move is what the drag-and-drop client calls)
    path('api/boards/<uuid:board_id>/tasks/', views.task_create, name='task_create'),
    path('api/boards/<uuid:board_id>/tasks/<uuid:task_id>/', views.task_detail, name='task_detail'),
    path('api/boards/<uuid:board_id>/tasks/<uuid:task_id>/move/', views.task_move, name='task_move'),

    # Members
    path('api/boards/<uuid:board_id>/members/', views.members, name='members'),
    path('api/boards/<uuid:board_id>/members/<int:user_id>/', views.member_detail, name='member_detail'),

    # History
    path('api/boards/<uuid:board_id>/activity/', views.activity, name='activity'),
]
