from django.contrib import admin

from orders.models import Order, Review


class ReviewInline(admin.StackedInline):
    model = Review
    extra = 0
    can_delete = False
    readonly_fields = ('rating', 'comment', 'buyer', 'farm', 'created_at')


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Orders are read-only here; status changes go through the API."""
    list_display = (
        'order_number', 'product', 'farm', 'buyer', 'quantity',
        'total_price', 'status', 'created_at'
    )
    list_filter = ('status', 'created_at')
    search_fields = ('order_number', 'buyer__email', 'farm__farm_name', 'product__name')
    list_select_related = ('product', 'farm', 'buyer')
    inlines = [ReviewInline]
    readonly_fields = (
        'order_number', 'product', 'farm', 'buyer', 'quantity', 'unit_price',
        'total_price', 'status', 'cancelled_by', 'created_at', 'updated_at',
        'confirmed_at', 'shipped_at', 'delivered_at', 'cancelled_at'
    )

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('order', 'farm', 'buyer', 'rating', 'created_at')
    list_filter = ('rating', 'created_at')
    search_fields = ('order__order_number', 'farm__farm_name', 'buyer__email')
    readonly_fields = ('order', 'farm', 'buyer', 'rating', 'comment', 'created_at')

    def has_delete_permission(self, request, obj=None):
        return False
