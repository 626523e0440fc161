"""
Django management command to populate the marketplace with sample sellers,
stores and products so orders can be placed against them.
Usage: python manage.py populate_sample_data
"""

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from marketplace.models import Product, Store

User = get_user_model()


class Command(BaseCommand):
    help = 'Populate the marketplace with sample sellers, stores and products'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete sample stores and their products first (orders referencing them block deletion)',
        )
        parser.add_argument(
            '--sellers',
            type=int,
            default=3,
            help='Number of sample sellers to create',
        )
        parser.add_argument(
            '--products',
            type=int,
            default=5,
            help='Number of products per store',
        )

    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing sample stores...')
            Product.objects.filter(store__owner__username__startswith='sample_seller_').delete()
            Store.objects.filter(owner__username__startswith='sample_seller_').delete()

        self.stdout.write('Creating sample data...')

        with transaction.atomic():
            buyer = self.create_user('sample_buyer')
            stores = [self.create_store(i) for i in range(1, options['sellers'] + 1)]
            product_count = sum(self.create_products(store, options['products']) for store in stores)

        self.stdout.write(
            self.style.SUCCESS(
                f'Done: {len(stores)} stores, {product_count} new products. '
                f'Place orders as "{buyer.username}" (password: sample-password)'
            )
        )

    def create_user(self, username):
        user, created = User.objects.get_or_create(username=username, defaults={'email': f'{username}@example.com'})
        if created:
            user.set_password('sample-password')
            user.save()
            self.stdout.write(f'Created user: {user.username}')
        return user

    def create_store(self, index):
        owner = self.create_user(f'sample_seller_{index}')
        store, created = Store.objects.get_or_create(
            owner=owner,
            name=f'Sample Store {index}',
            defaults={'description': f'Products sold by {owner.username}'},
        )
        if created:
            self.stdout.write(f'Created store: {store.name}')
        return store

    def create_products(self, store, count):
        created_count = 0
        for i in range(1, count + 1):
            _, created = Product.objects.get_or_create(
                store=store,
                name=f'{store.name} item {i}',
                defaults={
                    'price': Decimal(f'{random.randint(5, 200)}.{random.randint(0, 99):02d}'),
                    'stock_quantity': random.randint(1, 50),
                },
            )
            created_count += int(created)
        return created_count
