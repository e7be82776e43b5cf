from django.urls import path
from . import views

app_name = 'hafalan'

urlpatterns = [
    path('hafalan/', views.record_list, name='record_list'),
    path('hafalan/verses/', views.mark_verses, name='mark_verses'),
    path('hafalan/<int:record_id>/', views.record_detail, name='record_detail'),
    path('hafalan/<int:record_id>/history/', views.record_history, name='record_history'),
    path('hafalan/<int:record_id>/recheck/', views.submit_recheck, name='submit_recheck'),
    path('hafalan/<int:record_id>/notes/', views.update_notes, name='update_notes'),
    path('hafalan/<int:record_id>/teacher/', views.reassign_teacher, name='reassign_teacher'),

    path('partial/', views.create_partial, name='create_partial'),
    path('partial/<int:partial_id>/', views.update_partial, name='update_partial'),
    path('partial/<int:partial_id>/complete/', views.complete_partial, name='complete_partial'),
    path('partial/<int:partial_id>/cancel/', views.cancel_partial, name='cancel_partial'),
]
