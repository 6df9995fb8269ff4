from django.urls import path
from . import views

urlpatterns = [
    path('recalibrations/', views.recalibration_list_create, name='recalibration-list-create'),
    path('recalibrations/draft/', views.recalibration_draft, name='recalibration-draft'),
    path('recalibrations/last/', views.recalibration_last, name='recalibration-last'),
    path('recalibrations/pending/', views.recalibration_pending, name='recalibration-pending'),
    path('recalibrations/wastage-report/', views.wastage_report, name='recalibration-wastage-report'),
    path('recalibrations/<int:pk>/approve/', views.recalibration_approve, name='recalibration-approve'),
    path('recalibrations/<int:pk>/reject/', views.recalibration_reject, name='recalibration-reject'),
]
