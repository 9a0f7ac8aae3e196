#
# Provider registry
#

from threading import Thread
from unittest import TestCase

from zonekit.conformance import InMemoryProvider
from zonekit.exceptions import ConfigurationError, NotFoundError
from zonekit.registry import Registry


class TestRegistry(TestCase):
    def test_register_and_get(self):
        registry = Registry()
        provider = InMemoryProvider('alpha')
        registry.register(provider)
        self.assertIs(provider, registry.get('alpha'))
        self.assertIn('alpha', registry)
        self.assertEqual(1, len(registry))

    def test_get_unknown(self):
        with self.assertRaises(NotFoundError) as ctx:
            Registry().get('nope')
        self.assertIn('nope', str(ctx.exception))

    def test_duplicate_keeps_original(self):
        registry = Registry()
        original = InMemoryProvider('alpha')
        registry.register(original)
        with self.assertRaises(ConfigurationError):
            registry.register(InMemoryProvider('alpha'))
        self.assertIs(original, registry.get('alpha'))

    def test_empty_name(self):
        with self.assertRaises(ConfigurationError):
            Registry().register(InMemoryProvider(''))

    def test_list_and_names_are_copies(self):
        registry = Registry()
        registry.register(InMemoryProvider('alpha'))
        registry.register(InMemoryProvider('beta'))
        names = registry.names()
        self.assertEqual(['alpha', 'beta'], sorted(names))
        names.append('gamma')
        registry.list().clear()
        self.assertEqual(2, len(registry.list()))
        self.assertNotIn('gamma', registry)

    def test_unregister_and_clear(self):
        registry = Registry()
        registry.register(InMemoryProvider('alpha'))
        registry.unregister('missing')
        registry.unregister('alpha')
        self.assertNotIn('alpha', registry)
        registry.register(InMemoryProvider('beta'))
        registry.clear()
        registry.clear()
        self.assertEqual([], registry.names())

    def test_instances_are_independent(self):
        one, two = Registry(), Registry()
        one.register(InMemoryProvider('alpha'))
        self.assertNotIn('alpha', two)

    def test_concurrent_access(self):
        registry = Registry()
        errors = []

        def writer(i):
            try:
                registry.register(InMemoryProvider(f'p{i}'))
            except Exception as e:  # pragma: no cover
                errors.append(e)

        def reader():
            for _ in range(50):
                registry.names()
                registry.list()

        threads = [Thread(target=writer, args=(i,)) for i in range(20)]
        threads += [Thread(target=reader) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual([], errors)
        self.assertEqual(20, len(registry))
