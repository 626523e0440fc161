from django.contrib import admin

from .models import OrderItemRecord, OrderRecord, Product, Store


class ProductInline(admin.TabularInline):
    model = Product
    extra = 0
    fields = ('name', 'price', 'stock_quantity', 'is_active')
    show_change_link = True


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ('name', 'owner', 'is_active', 'product_count', 'created_at')
    list_filter = ('is_active', 'created_at')
    search_fields = ('name', 'owner__username')
    readonly_fields = ('id', 'created_at', 'updated_at')

    inlines = [ProductInline]

    def product_count(self, obj):
        return obj.products.count()
    product_count.short_description = "Products"


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'store', 'price', 'stock_quantity', 'is_active', 'created_at')
    list_filter = ('is_active', 'created_at')
    search_fields = ('name', 'description', 'store__name', 'store__owner__username')
    readonly_fields = ('id', 'slug', 'created_at', 'updated_at')
    list_editable = ('price', 'stock_quantity', 'is_active')


class OrderItemInline(admin.TabularInline):
    model = OrderItemRecord
    extra = 0
    can_delete = False
    readonly_fields = ('position', 'product', 'quantity', 'unit_price')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(OrderRecord)
class OrderAdmin(admin.ModelAdmin):
    """
    Read-only view of orders.

    Status changes go through OrderService so the transition table and the
    version check apply; there are no bulk status actions here.
    """

    list_display = ('id', 'buyer', 'seller', 'status', 'total', 'created_at', 'item_count')
    list_filter = ('status', 'created_at', 'updated_at')
    search_fields = ('id', 'buyer__username', 'seller__username')
    readonly_fields = ('id', 'buyer', 'seller', 'status', 'total', 'version', 'created_at', 'updated_at')

    inlines = [OrderItemInline]

    def item_count(self, obj):
        return obj.items.count()
    item_count.short_description = "Items"

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
