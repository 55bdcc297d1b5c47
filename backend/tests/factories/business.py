"""Factory Boy definition for :class:`justping.models.Business`."""

from __future__ import annotations

import factory

from justping.models import Business
from tests.factories import BaseFactory


class BusinessFactory(BaseFactory):
    class Meta:
        model = Business

    name = factory.Faker("company")
    description = factory.Faker("catch_phrase")
    website = factory.Sequence(lambda n: f"https://business{n}.example.com")
    industry = "retail"
    contact_info = factory.LazyFunction(lambda: {"phone": "+15550100"})
