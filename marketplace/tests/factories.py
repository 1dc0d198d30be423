import uuid
from decimal import Decimal

import factory
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.utils import timezone
from django.utils.text import slugify
from faker import Faker

from marketplace.models import (
    AuditLogEntry,
    Category,
    Order,
    Payout,
    Product,
    ProductReview,
    ProductVariant,
    ReturnCase,
    SellerRating,
    SubOrder,
)
from marketplace.querying.statuses import ModerationStatus, OrderStatus, PaymentStatus, ReviewStatus
from utils.rbac import ROLE_ADMIN, ROLE_SELLER

User = get_user_model()
fake = Faker()  # Instantiate Faker once


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User
        django_get_or_create = ("username",)

    username = factory.Sequence(lambda n: f"user_{n}")
    email = factory.Sequence(lambda n: f"user_{n}@example.com")
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    password = factory.PostGenerationMethodCall("set_password", "defaultpassword")
    is_active = True


class SellerFactory(UserFactory):
    username = factory.Sequence(lambda n: f"seller_{n}")
    email = factory.Sequence(lambda n: f"seller_{n}@example.com")

    @factory.post_generation
    def seller_group(self, create, extracted, **kwargs):
        if create:
            group, _ = Group.objects.get_or_create(name=ROLE_SELLER)
            self.groups.add(group)


class AdminFactory(UserFactory):
    username = factory.Sequence(lambda n: f"admin_{n}")
    email = factory.Sequence(lambda n: f"admin_{n}@example.com")

    @factory.post_generation
    def admin_group(self, create, extracted, **kwargs):
        if create:
            group, _ = Group.objects.get_or_create(name=ROLE_ADMIN)
            self.groups.add(group)


class CategoryFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Category

    name = factory.Sequence(lambda n: f"Category {n}")
    slug = factory.LazyAttribute(lambda o: slugify(o.name))
    is_active = True


class ProductFactory(factory.django.DjangoModelFactory):
    """A listed product: published and approved."""

    class Meta:
        model = Product

    id = factory.LazyFunction(uuid.uuid4)
    name = factory.Sequence(lambda n: f"Product {n}")
    description = factory.LazyFunction(lambda: fake.paragraph(nb_sentences=3))
    seller = factory.SubFactory(SellerFactory)
    category = factory.SubFactory(CategoryFactory)
    price = factory.LazyFunction(lambda: Decimal(fake.random_int(min=5, max=500)))
    stock_quantity = 10
    condition = "new"
    workflow_state = Product.WORKFLOW_PUBLISHED
    moderation_status = ModerationStatus.APPROVED


class PendingProductFactory(ProductFactory):
    workflow_state = Product.WORKFLOW_DRAFT
    moderation_status = ModerationStatus.PENDING


class ProductVariantFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProductVariant

    product = factory.SubFactory(ProductFactory)
    sku = factory.Sequence(lambda n: f"SKU-{n:05d}")
    attributes = factory.LazyFunction(lambda: {"Color": fake.color_name()})
    stock_quantity = 5
    price = None


class ProductReviewFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProductReview

    product = factory.SubFactory(ProductFactory)
    reviewer = factory.SubFactory(UserFactory)
    reviewer_name = factory.LazyAttribute(lambda o: o.reviewer.username if o.reviewer else "")
    rating = factory.LazyFunction(lambda: fake.random_int(min=1, max=5))
    title = factory.Faker("sentence", nb_words=4)
    comment = factory.Faker("paragraph", nb_sentences=2)
    status = ReviewStatus.PENDING


class SellerRatingFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = SellerRating

    seller = factory.SubFactory(SellerFactory)
    rater = factory.SubFactory(UserFactory)
    rater_name = factory.LazyAttribute(lambda o: o.rater.username if o.rater else "")
    rating = factory.LazyFunction(lambda: fake.random_int(min=1, max=5))
    comment = factory.Faker("paragraph", nb_sentences=2)
    status = ReviewStatus.PENDING


class OrderFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Order

    order_number = factory.Sequence(lambda n: f"ORD-{n:06d}")
    buyer = factory.SubFactory(UserFactory)
    status = OrderStatus.PAID
    payment_status = PaymentStatus.PAID
    items_subtotal = Decimal("100.00")
    grand_total = Decimal("100.00")
    created_at = factory.LazyFunction(timezone.now)


class SubOrderFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = SubOrder

    order = factory.SubFactory(OrderFactory)
    sub_order_number = factory.Sequence(lambda n: f"SUB-{n:06d}")
    seller = factory.SubFactory(SellerFactory)
    status = OrderStatus.PAID
    order_value = Decimal("100.00")
    commission = Decimal("10.00")
    payout_amount = Decimal("90.00")
    created_at = factory.LazyFunction(timezone.now)


class PayoutFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Payout

    seller = factory.SubFactory(SellerFactory)
    reference = factory.Sequence(lambda n: f"PO-{n:06d}")
    gross_amount = Decimal("200.00")
    commission = Decimal("20.00")
    amount = Decimal("180.00")
    created_at = factory.LazyFunction(timezone.now)


class ReturnCaseFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ReturnCase

    case_number = factory.Sequence(lambda n: f"RET-{n:06d}")
    order = factory.SubFactory(OrderFactory)
    buyer = factory.SelfAttribute("order.buyer")
    seller = factory.SubFactory(SellerFactory)
    reason = "Item not as described"
    description = factory.Faker("sentence")
    created_at = factory.LazyFunction(timezone.now)


class AuditLogEntryFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = AuditLogEntry

    entity_type = "Product"
    resource_id = factory.LazyFunction(lambda: str(uuid.uuid4()))
    action = "moderation_approved"
    actor = factory.SubFactory(AdminFactory)
    actor_name = factory.LazyAttribute(lambda o: o.actor.username if o.actor else "System")
    succeeded = True
    created_at = factory.LazyFunction(timezone.now)
