"""
Test utilities and factories for creating test data
"""
import random
import string
from datetime import time
from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from bhandar.catalog.models import InventoryItem
from bhandar.core import timeutils
from bhandar.hr.models import Employee, Timesheet, Leave
from bhandar.locations.models import Store, ProductionHouse
from bhandar.production.models import (
    ProductionBatch, ProductionBatchLine, ProductionRequest, ProductionRequestLine,
)
from bhandar.sales.models import SalesRecord, ItemSale

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role=None, is_staff=False,
                    is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username.lower()}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            is_staff=is_staff,
            is_superuser=is_superuser,
        )

    @staticmethod
    def create_cluster_head(**kwargs):
        return TestDataFactory.create_user(role=User.ROLE_CLUSTER_HEAD, **kwargs)

    @staticmethod
    def create_manager(**kwargs):
        return TestDataFactory.create_user(role=User.ROLE_MANAGER, **kwargs)

    @staticmethod
    def create_production_house(name=None, code=None, production_head=None):
        if not name:
            name = f'Kitchen_{TestDataFactory.random_string(6)}'
        if not code:
            code = f'PH_{TestDataFactory.random_string(6).upper()}'
        return ProductionHouse.objects.create(name=name, code=code, address=f'Test Address {name}',
                                              phone='1234567890', production_head=production_head)

    @staticmethod
    def create_store(name=None, code=None, production_house=None, manager=None):
        """Create a test store"""
        if not name:
            name = f'Store_{TestDataFactory.random_string(6)}'
        if not code:
            code = f'STORE_{TestDataFactory.random_string(6).upper()}'
        return Store.objects.create(name=name, code=code, address=f'Test Address {name}', phone='1234567890',
                                    production_house=production_house, manager=manager)

    @staticmethod
    def create_item(name=None, display_name=None, category='finished_product', unit='pieces',
                    linked_entity_type='global', linked_entity_id=None):
        if not name:
            name = f'item_{TestDataFactory.random_string(6).lower()}'
        return InventoryItem.objects.create(
            name=name,
            display_name=display_name or name.replace('_', ' ').title(),
            category=category,
            unit=unit,
            linked_entity_type=linked_entity_type,
            linked_entity_id=linked_entity_id,
        )

    @staticmethod
    def create_employee(employee_id=None, name=None, role='employee', manager=None, cluster_head=None, store=None,
                        user=None, joining_date=None):
        if not employee_id:
            employee_id = f'T{TestDataFactory.random_string(6).upper()}'
        return Employee.objects.create(
            employee_id=employee_id,
            name=name or f'Employee {employee_id}',
            email=f'{employee_id.lower()}@test.com',
            role=role,
            manager=manager,
            cluster_head=cluster_head,
            store=store,
            user=user,
            joining_date=joining_date,
        )

    @staticmethod
    def create_timesheet(employee, date=None, start=time(9, 0), end=time(17, 0), status='pending'):
        return Timesheet.objects.create(
            employee=employee,
            date=date or timeutils.today(),
            start_time=start,
            end_time=end,
            total_hours=Decimal('8.00'),
            status=status,
        )

    @staticmethod
    def create_leave(employee, leave_date=None, status='pending', reason='Family function'):
        return Leave.objects.create(employee=employee, leave_date=leave_date or timeutils.today(),
                                    reason=reason, status=status)

    @staticmethod
    def create_sales_record(store, user=None, date=None, **amounts):
        return SalesRecord.objects.create(store=store, created_by=user, date=date or timeutils.today(), **amounts)

    @staticmethod
    def create_item_sale(item_name, quantity, date, store=None):
        return ItemSale.objects.create(item_name=item_name, quantity=quantity, revenue=Decimal('0'), date=date,
                                       store=store)

    @staticmethod
    def create_batch(production_house, date, lines, approved=True, user=None):
        """lines: {InventoryItem: final quantity}"""
        batch = ProductionBatch.objects.create(
            production_house=production_house,
            date=date,
            created_by=user,
            approval_status=ProductionBatch.STATUS_APPROVED if approved else ProductionBatch.STATUS_PENDING,
        )
        for item, final in lines.items():
            ProductionBatchLine.objects.create(batch=batch, item=item, final=final)
        return batch

    @staticmethod
    def create_production_request(store, lines, request_date=None, status='pending', user=None,
                                  delivered_date=None, shipped_at=None):
        """lines: {InventoryItem: quantity}"""
        production_request = ProductionRequest.objects.create(
            store=store,
            production_house=store.production_house,
            request_date=request_date or timeutils.today(),
            status=status,
            requested_by=user,
            delivered_date=delivered_date,
            shipped_at=shipped_at,
        )
        for item, quantity in lines.items():
            ProductionRequestLine.objects.create(request=production_request, item=item, quantity=quantity)
        return production_request


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
