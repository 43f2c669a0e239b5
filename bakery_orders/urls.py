"""
URL configuration for bakery_orders project.
"""
from django.contrib import admin
from django.urls import path

from orders.api.views import graphql_view, payment_update_view

urlpatterns = [
    path('admin/', admin.site.urls),
    path('graphql/', graphql_view, name='graphql'),
    path('api/orders/<uuid:order_id>/payment-update', payment_update_view, name='payment-update'),
]
