from django.urls import path
from .views import export_dataset

urlpatterns = [
    path('export/<str:dataset>/', export_dataset, name='export-dataset'),
]
