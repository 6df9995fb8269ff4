import csv
import io
from datetime import date
from unittest.mock import patch

from django.test import TestCase
from rest_framework import status

from bhandar.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .exporters import export_rows, to_csv


class ExporterTests(TestCase):
    def test_to_csv_encodes_nested_values(self):
        output = to_csv(['id', 'lines', 'notes'], [{'id': 1, 'lines': [{'item': 2}], 'notes': None}])
        self.assertEqual(output, 'id,lines,notes\n1,"[{""item"": 2}]",\n')

    def test_export_rows_filters_by_date(self):
        store = TestDataFactory.create_store()
        TestDataFactory.create_sales_record(store, date=date(2026, 3, 1))
        TestDataFactory.create_sales_record(store, date=date(2026, 3, 20))
        headers, rows = export_rows('sales', date(2026, 3, 10), None)
        self.assertIn('store_name', headers)
        self.assertEqual([row['date'] for row in rows], ['2026-03-20'])


class ExportApiTests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_manager())
        store = TestDataFactory.create_store(name='Mall Road')
        TestDataFactory.create_sales_record(store, date=date(2026, 3, 1), offline_sales='1200.00')

    @patch('bhandar.core.timeutils.today', return_value=date(2026, 3, 31))
    def test_csv_download(self, _today):
        response = self.client.get('/api/v1/export/sales/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response['Content-Type'].startswith('text/csv'))
        self.assertEqual(response['Content-Disposition'], 'attachment; filename="sales_2026-03-31.csv"')

        rows = list(csv.DictReader(io.StringIO(response.content.decode('utf-8'))))
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['store_name'], 'Mall Road')
        self.assertEqual(rows[0]['offline_sales'], '1200.00')

    def test_json_export(self):
        response = self.client.get('/api/v1/export/sales/', {'format': 'json'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['dataset'], 'sales')
        self.assertEqual(response.data['count'], 1)

    def test_unknown_dataset_and_format(self):
        self.assertEqual(self.client.get('/api/v1/export/jewellery/').status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.get('/api/v1/export/sales/', {'format': 'xlsx'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_employee_forbidden(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(role='employee'))
        self.assertEqual(client.get('/api/v1/export/payouts/').status_code, status.HTTP_403_FORBIDDEN)
