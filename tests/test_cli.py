"""
Tests for the intelligence CLI.
"""

import json

import pytest
import yaml

from modules.intelligence import cache as cache_module
from modules.intelligence import cli
from modules.intelligence.cache import IntelligenceCache, RedisCacheBackend
from modules.intelligence.config_loader import IntelligenceConfig
from modules.intelligence.intelligence_service import IntelligenceService
from shared.utils.config import settings

from tests.conftest import NOW, TENANT
from tests.test_cache import FakeRedis


@pytest.fixture
def service(seeded_store):
    return IntelligenceService(store=seeded_store, config=IntelligenceConfig(), clock=lambda: NOW)


def test_parser():
    args = cli.build_parser().parse_args(["report", TENANT, "--json", "--actor", "user-1"])

    assert args.command == "report"
    assert args.tenant_id == TENANT
    assert args.as_json
    assert args.actor_id == "user-1"
    assert not args.no_cache


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


@pytest.mark.asyncio
async def test_text_report(service):
    report = await cli.render_report(service, TENANT)

    assert report.startswith("## Business Health: 80% (steady)")
    assert "## PROACTIVE INSIGHTS" in report


@pytest.mark.asyncio
async def test_json_report(service):
    report = json.loads(await cli.render_report(service, TENANT, as_json=True))

    assert report["tenant_id"] == TENANT
    assert report["health_score"]["overall"] == 80
    assert report["correlations"][0]["urgency"] == "immediate"


@pytest.mark.asyncio
async def test_report_for_quiet_tenant(memory_store):
    service = IntelligenceService(store=memory_store, config=IntelligenceConfig(), clock=lambda: NOW)

    report = await cli.render_report(service, TENANT)

    assert report.endswith("No insights right now.")


@pytest.mark.asyncio
async def test_report_computes_once(service, seeded_store):
    await service.compute(TENANT, IntelligenceConfig())
    queries_per_computation = seeded_store.query_count
    seeded_store.query_count = 0

    await cli.render_report(service, TENANT)

    assert seeded_store.query_count == queries_per_computation


class FakeService:
    instances = []

    def __init__(self, **kwargs):
        self.invalidated = []
        FakeService.instances.append(self)

    async def invalidate(self, tenant_id, actor_id=None):
        self.invalidated.append((tenant_id, actor_id))


@pytest.mark.asyncio
async def test_main_invalidate(monkeypatch, capsys):
    monkeypatch.setattr(cli, "IntelligenceService", FakeService)
    monkeypatch.setattr(cli, "create_cache", lambda: None)

    code = await cli.main(["invalidate", TENANT])

    assert code == 0
    assert f"Invalidated cached intelligence for {TENANT}" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_main_bad_config_exit_code(monkeypatch, tmp_path):
    (tmp_path / "default.yaml").write_text(yaml.safe_dump({"cache_ttl_seconds": 60}))
    monkeypatch.setattr(settings, "INSIGHTS_CONFIG_PATH", str(tmp_path))
    monkeypatch.setattr(cli, "IntelligenceService", FakeService)
    monkeypatch.setattr(cli, "create_cache", lambda: None)
    FakeService.instances.clear()

    assert await cli.main(["invalidate", TENANT]) == 2
    assert FakeService.instances[0].invalidated == []


@pytest.mark.asyncio
async def test_main_accepts_opaque_tenant_id(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(settings, "INSIGHTS_CONFIG_PATH", str(tmp_path))
    monkeypatch.setattr(cli, "IntelligenceService", FakeService)
    monkeypatch.setattr(cli, "create_cache", lambda: None)

    assert await cli.main(["invalidate", "org:42"]) == 0
    assert "Invalidated cached intelligence for org:42" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_main_check(monkeypatch, capsys):
    async def reachable():
        return True

    async def unreachable():
        return False

    monkeypatch.setattr(cli, "check_connection", reachable)
    monkeypatch.setattr(cli, "create_cache", lambda: None)

    assert await cli.main(["check"]) == 0
    assert "Database reachable" in capsys.readouterr().out

    monkeypatch.setattr(cli, "check_connection", unreachable)
    assert await cli.main(["check"]) == 1


@pytest.mark.asyncio
async def test_main_check_pings_redis_and_closes_it(monkeypatch, capsys):
    async def reachable():
        return True

    client = FakeRedis(fail=True)
    monkeypatch.setattr(cache_module.redis, "from_url", lambda url, **kwargs: client)
    monkeypatch.setattr(cli, "check_connection", reachable)
    monkeypatch.setattr(cli, "create_cache", lambda: IntelligenceCache(RedisCacheBackend()))

    assert await cli.main(["check"]) == 1
    assert "Redis unreachable" in capsys.readouterr().out
    assert client.closed
