import random
import uuid
from decimal import Decimal

import factory
from django.contrib.auth import get_user_model
from faker import Faker  # Import Faker class for explicit generation

from marketplace.models import Product, Store

User = get_user_model()
fake = Faker()  # Instantiate Faker once


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f"user_{n}")
    email = factory.Sequence(lambda n: f"user_{n}@example.com")
    password = factory.PostGenerationMethodCall("set_password", "defaultpassword")
    is_active = True


class SellerFactory(UserFactory):
    username = factory.Sequence(lambda n: f"seller_{n}")
    email = factory.Sequence(lambda n: f"seller_{n}@example.com")


class StoreFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Store

    owner = factory.SubFactory(SellerFactory)
    name = factory.LazyFunction(lambda: fake.company())
    description = factory.Faker("sentence", nb_words=10)
    is_active = True


class ProductFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Product

    id = factory.LazyFunction(uuid.uuid4)
    name = factory.Sequence(lambda n: f"Product {n}")
    description = factory.Faker("paragraph", nb_sentences=3)
    store = factory.SubFactory(StoreFactory)
    price = factory.LazyFunction(lambda: Decimal(f"{random.randint(10, 500)}.00"))
    stock_quantity = factory.Faker("random_int", min=1, max=100)
    is_active = True
