"""Tests for the shared registries."""
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from ec2launch.domain.value_objects import KeyPair, RegionAndName, RegionNameAndIngressRules
from ec2launch.infrastructure.exceptions import KeyPairError
from ec2launch.providers.aws.registries import CredentialsStore, SecurityGroupMap


@pytest.mark.unit
class TestCredentialsStore:

    def setup_method(self):
        self.store = CredentialsStore()
        self.key = RegionAndName(region="us-east-1", name="web")

    def test_put_and_get(self):
        pair = KeyPair(region="us-east-1", key_name="jclouds#web")
        self.store.put(self.key, pair)

        assert self.store.get(self.key) == pair
        assert self.store.contains(self.key)
        assert len(self.store) == 1

    def test_put_replaces(self):
        self.store.put(self.key, KeyPair(region="us-east-1", key_name="old"))
        self.store.put(self.key, KeyPair(region="us-east-1", key_name="new"))

        assert self.store.get(self.key).key_name == "new"

    def test_get_or_create_creates_once(self):
        created = []

        def create(key):
            created.append(key)
            return KeyPair(region=key.region, key_name=f"k{len(created)}")

        first = self.store.get_or_create(self.key, create)
        second = self.store.get_or_create(self.key, create)

        assert first.key_name == second.key_name == "k1"
        assert created == [self.key]

    def test_get_or_create_keeps_a_stored_pair(self):
        self.store.put(self.key, KeyPair(region="us-east-1", key_name="stored"))

        pair = self.store.get_or_create(self.key, lambda key: pytest.fail("must not create"))

        assert pair.key_name == "stored"

    def test_concurrent_get_or_create_creates_one_pair(self):
        created = []
        barrier = threading.Barrier(8)
        lock = threading.Lock()

        def create(key):
            with lock:
                created.append(key)
            time.sleep(0.05)
            return KeyPair(region=key.region, key_name=f"k{len(created)}")

        def resolve(_):
            barrier.wait()
            return self.store.get_or_create(self.key, create)

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(resolve, range(8)))

        assert len(created) == 1
        assert {r.key_name for r in results} == {"k1"}

    def test_failed_creation_is_retried(self):
        def fail(key):
            raise KeyPairError("boom")

        with pytest.raises(KeyPairError):
            self.store.get_or_create(self.key, fail)
        assert self.store.get(self.key) is None
        assert len(self.store._key_locks) == 0

        pair = self.store.get_or_create(self.key, lambda key: KeyPair(region=key.region, key_name="retry"))
        assert pair.key_name == "retry"

    def test_remove(self):
        self.store.put(self.key, KeyPair(region="us-east-1", key_name="jclouds#web"))

        assert self.store.remove(self.key).key_name == "jclouds#web"
        assert self.store.get(self.key) is None
        assert self.store.items() == []


@pytest.mark.unit
class TestSecurityGroupMap:

    def test_ingress_rules_do_not_split_the_group(self):
        """Test that one group exists per region and name whatever the ports."""
        created = []
        groups = SecurityGroupMap(lambda key: created.append(key) or key.name)

        groups.get(RegionNameAndIngressRules(region="us-east-1", name="jclouds#web", ports=(22,)))
        groups.get(RegionNameAndIngressRules(region="us-east-1", name="jclouds#web", ports=(22, 80)))
        groups.get(RegionNameAndIngressRules(region="us-west-2", name="jclouds#web", ports=(22,)))

        assert len(created) == 2
        assert created[0].ports == (22,)
