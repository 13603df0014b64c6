"""
Fixture factories built on the entity_seeding Factory base.

Values are generated with Faker inside the ``entity`` hooks; ``PetFactory``
obtains its owner through ``self.factory(UserFactory)`` so the owner is made
or created together with the pet.
"""

from faker import Faker

from entity_seeding import Factory, FactoryOptions

from .entities import Pet, User

fake = Faker()


class UserFactory(Factory[User]):
    options = FactoryOptions(entity=User)

    async def entity(self, user=None, context=None):
        user.name = fake.name()
        user.email = fake.unique.email()
        return user


class PetFactory(Factory[Pet]):
    options = FactoryOptions(entity=Pet)

    async def entity(self, pet=None, context=None):
        pet.name = fake.first_name()
        pet.owner = self.factory(UserFactory)
        return pet


class TenantUserFactory(UserFactory):
    """Requires the tenant to be named in the context, by id or by slug."""

    options = FactoryOptions(entity=User, required_context_keys=[("tenant_id", "tenant_slug")])

    async def entity(self, user=None, context=None):
        user = await super().entity(user, context)
        tenant = context.get("tenant_slug") or context.get("tenant_id")
        user.email = f"{fake.user_name()}@{tenant}.example.com"
        return user


class AdminFactory(UserFactory):
    """Used as a pool override for UserFactory."""

    async def entity(self, user=None, context=None):
        user = await super().entity(user, context)
        user.name = f"Admin {user.name}"
        return user


class BareFactory(Factory):
    """No entity class and no entity hook."""


class SelfReferencingFactory(Factory):
    """Each entity needs another one of its own kind; never terminates on its own."""

    class Node:
        parent = None

    options = FactoryOptions(entity=Node, max_depth=5)

    async def entity(self, node=None, context=None):
        node.parent = SelfReferencingFactory()
        return node
