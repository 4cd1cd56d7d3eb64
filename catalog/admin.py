from django.contrib import admin

from catalog.models import Cultivar, Product


@admin.register(Cultivar)
class CultivarAdmin(admin.ModelAdmin):
    list_display = ('name', 'thai_name', 'slug', 'updated_at')
    search_fields = ('name', 'thai_name', 'slug')
    prepopulated_fields = {'slug': ('name',)}


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        'name', 'farm', 'product_type', 'price_per_unit',
        'available_quantity', 'unit', 'harvest_date', 'status'
    )
    list_filter = ('status', 'product_type', 'harvest_date')
    search_fields = ('name', 'farm__farm_name')
    list_select_related = ('farm',)
    readonly_fields = ('created_at', 'updated_at', 'retired_at')
    raw_id_fields = ('farm',)
