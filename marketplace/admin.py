from django.contrib import admin

from infrastructure.container import container
from marketplace.querying.statuses import ModerationStatus

from .models import (
    AuditLogEntry, Cart, CartItem, Category, Order, Payout, Product, ProductReview,
    ProductVariant, ReportExportJob, ReturnCase, SellerRating, SubOrder
)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'parent', 'is_active', 'created_at')
    list_filter = ('is_active', 'parent')
    search_fields = ('name',)
    prepopulated_fields = {'slug': ('name',)}


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0
    fields = ('sku', 'attributes', 'stock_quantity', 'price')


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'seller', 'category', 'price', 'stock_quantity',
                    'workflow_state', 'moderation_status', 'created_at')
    list_filter = ('workflow_state', 'moderation_status', 'condition', 'category')
    search_fields = ('name', 'description', 'seller__username')
    readonly_fields = ('id', 'moderated_at', 'created_at', 'updated_at')
    inlines = [ProductVariantInline]

    actions = ['approve_products', 'reject_products']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('seller', 'category')

    def _moderate(self, request, queryset, new_status):
        # Goes through the service so every decision lands in the audit log
        service = container.moderation_service()
        applied = sum(
            1 for product in queryset
            if service.set_product_status(product.pk, new_status, actor=request.user).ok
        )
        self.message_user(request, f"{applied} products marked {new_status}.")

    def approve_products(self, request, queryset):
        self._moderate(request, queryset, ModerationStatus.APPROVED)
    approve_products.short_description = "Approve selected products"

    def reject_products(self, request, queryset):
        self._moderate(request, queryset, ModerationStatus.REJECTED)
    reject_products.short_description = "Reject selected products"


@admin.register(ProductReview)
class ProductReviewAdmin(admin.ModelAdmin):
    list_display = ('product', 'reviewer', 'rating', 'status', 'is_flagged', 'created_at')
    list_filter = ('status', 'is_flagged', 'rating')
    search_fields = ('product__name', 'reviewer__username', 'title', 'comment')
    readonly_fields = ('moderated_at', 'created_at')


@admin.register(SellerRating)
class SellerRatingAdmin(admin.ModelAdmin):
    list_display = ('seller', 'rater', 'rating', 'status', 'is_flagged', 'created_at')
    list_filter = ('status', 'is_flagged', 'rating')
    search_fields = ('seller__username', 'rater__username', 'comment')
    readonly_fields = ('moderated_at', 'created_at')


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    readonly_fields = ('product', 'seller_id', 'variant_attributes', 'quantity', 'position', 'added_at')


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ('cart_key', 'user', 'promo_code', 'updated_at')
    search_fields = ('cart_key', 'user__username')
    inlines = [CartItemInline]


class SubOrderInline(admin.TabularInline):
    model = SubOrder
    extra = 0
    readonly_fields = ('sub_order_number', 'seller', 'status', 'order_value', 'commission', 'payout_amount')


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('order_number', 'buyer', 'status', 'payment_status', 'grand_total', 'created_at')
    list_filter = ('status', 'payment_status', 'created_at')
    search_fields = ('order_number', 'buyer__username', 'buyer__email')
    readonly_fields = ('id', 'created_at', 'updated_at')
    inlines = [SubOrderInline]


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    list_display = ('reference', 'seller', 'status', 'gross_amount', 'commission', 'amount', 'paid_at')
    list_filter = ('status',)
    search_fields = ('reference', 'seller__username')


@admin.register(ReturnCase)
class ReturnCaseAdmin(admin.ModelAdmin):
    list_display = ('case_number', 'order', 'buyer', 'seller', 'status', 'created_at')
    list_filter = ('status', 'created_at')
    search_fields = ('case_number', 'reason', 'order__order_number')


@admin.register(AuditLogEntry)
class AuditLogEntryAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'entity_type', 'action', 'resource_id', 'actor_name', 'succeeded')
    list_filter = ('entity_type', 'succeeded')
    search_fields = ('action', 'resource_id', 'actor_name')

    # Audit entries are append-only
    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ReportExportJob)
class ReportExportJobAdmin(admin.ModelAdmin):
    list_display = ('id', 'report_kind', 'status', 'row_count', 'truncated', 'requested_by', 'created_at')
    list_filter = ('report_kind', 'status')
    readonly_fields = ('id', 'criteria', 'row_count', 'total_matching', 'truncated', 'error',
                       'created_at', 'started_at', 'completed_at')
    exclude = ('content',)
