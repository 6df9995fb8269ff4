from rest_framework import serializers
from .models import Store, ProductionHouse


class ProductionHouseSerializer(serializers.ModelSerializer):
    production_head_name = serializers.CharField(source='production_head.display_name', read_only=True, default=None)
    store_count = serializers.SerializerMethodField()

    class Meta:
        model = ProductionHouse
        fields = ['id', 'name', 'code', 'address', 'phone', 'production_head', 'production_head_name',
                  'store_count', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['production_head']

    def get_store_count(self, obj):
        return obj.stores.filter(is_active=True).count()


class StoreSerializer(serializers.ModelSerializer):
    production_house_name = serializers.CharField(source='production_house.name', read_only=True, default=None)
    manager_name = serializers.CharField(source='manager.display_name', read_only=True, default=None)

    class Meta:
        model = Store
        fields = ['id', 'name', 'code', 'address', 'phone', 'production_house', 'production_house_name',
                  'manager', 'manager_name', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['manager']
