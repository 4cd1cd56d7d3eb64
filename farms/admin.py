from django.contrib import admin

from farms.models import FarmProfile, FarmUpgradeRequest


@admin.register(FarmProfile)
class FarmProfileAdmin(admin.ModelAdmin):
    list_display = (
        'farm_name', 'owner', 'farm_location', 'verified',
        'rating', 'total_reviews', 'total_sales', 'created_at'
    )
    list_filter = ('verified', 'created_at')
    search_fields = ('farm_name', 'farm_location', 'owner__email')
    raw_id_fields = ('owner',)
    # Derived from reviews by orders.ratings
    readonly_fields = ('rating', 'total_reviews', 'total_sales', 'created_at', 'updated_at')


@admin.register(FarmUpgradeRequest)
class FarmUpgradeRequestAdmin(admin.ModelAdmin):
    list_display = ('farm_name', 'user', 'status', 'reviewed_by', 'reviewed_at', 'created_at')
    list_filter = ('status', 'created_at')
    search_fields = ('farm_name', 'user__email')
    raw_id_fields = ('user', 'reviewed_by')
    readonly_fields = ('reviewed_at', 'created_at', 'updated_at')
