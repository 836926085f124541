"""Unit tests for the ShortLinkRegistry

Test coverage includes:

1. Creation
   - Ensures targets are normalized, stored and indexed by hash.
   - Ensures the same URL always yields the same code without new writes.
   - Ensures invalid URLs are rejected before any write.

2. Collision handling
   - Ensures taken candidates are skipped.
   - Ensures the last candidate is written unconditionally.
   - Ensures a writer losing the indexing race returns the winner's code.

3. Resolution
   - Ensures codes resolve to their targets and unknown codes raise.
"""

import pytest

from gitmirror.models import ShortLinkModel
from gitmirror.services import ShortLinkRegistry
from gitmirror.dao.exceptions import ShortLinkNotFoundError
from gitmirror.exceptions import HostNotAllowedError, MalformedURLError
from gitmirror.utils.shortener import url_hash


TARGET = 'https://github.com/a/b/releases/download/v1/app.zip'


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def registry(settings, link_dao) -> ShortLinkRegistry:
    return ShortLinkRegistry(settings, link_dao)


@pytest.fixture
def codes(monkeypatch):
    """Make generate_shortcode() return a scripted sequence of candidates."""
    sequence: list[str] = []

    def fake_generate_shortcode(length=6, alphabet=None):
        return sequence.pop(0)

    monkeypatch.setattr('gitmirror.services.short_link_registry.generate_shortcode', fake_generate_shortcode)
    return sequence


# -------------------------------
# 1. Creation
# -------------------------------


@pytest.mark.asyncio
async def test_create(registry, link_dao):
    link = await registry.create('  github.com/a/b/releases/download/v1/app.zip ')

    assert link.target == TARGET
    assert len(link.code) == 6
    assert link_dao.links == {link.code: TARGET}
    assert link_dao.codes == {url_hash(TARGET): link.code}


@pytest.mark.asyncio
async def test_create_is_idempotent(registry, link_dao):
    first = await registry.create(TARGET)
    second = await registry.create('github.com/a/b/releases/download/v1/app.zip')

    assert first == second
    assert len(link_dao.inserts) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize('url, error', [('https://example.com/x.zip', HostNotAllowedError), ('https://', MalformedURLError)])
async def test_create_rejects_invalid_urls(registry, link_dao, url, error):
    with pytest.raises(error):
        await registry.create(url)

    assert link_dao.inserts == []
    assert link_dao.codes == {}


# -------------------------------
# 2. Collision handling
# -------------------------------


@pytest.mark.asyncio
async def test_create_skips_taken_codes(registry, link_dao, codes):
    link_dao.links.update({'taken1': 'https://github.com/x', 'taken2': 'https://github.com/y'})
    codes.extend(['taken1', 'taken2', 'free01'])

    link = await registry.create(TARGET)

    assert link.code == 'free01'
    assert link_dao.inserts == [('taken1', False), ('taken2', False), ('free01', False)]
    assert link_dao.links['taken1'] == 'https://github.com/x'


@pytest.mark.asyncio
async def test_create_forces_last_candidate(registry, link_dao, codes):
    """Four checked candidates, then the fifth is written regardless of collisions."""
    link_dao.links.update({f'taken{i}': f'https://github.com/{i}' for i in range(1, 5)})
    codes.extend(['taken1', 'taken2', 'taken3', 'taken4', 'taken1'])

    link = await registry.create(TARGET)

    assert link.code == 'taken1'
    assert link_dao.inserts == [('taken1', False), ('taken2', False), ('taken3', False), ('taken4', False), ('taken1', True)]
    assert link_dao.links['taken1'] == TARGET


@pytest.mark.asyncio
async def test_create_returns_race_winner(registry, link_dao, codes, monkeypatch):
    """A concurrent writer indexed the URL between our lookup and our index write."""
    link_dao.links['Winner'] = TARGET
    link_dao.codes[url_hash(TARGET)] = 'Winner'

    async def stale_find(url_hash, **kwargs):
        return None

    monkeypatch.setattr(link_dao, 'find', stale_find)
    codes.append('Orphan')

    link = await registry.create(TARGET)

    assert link == ShortLinkModel(code='Winner', target=TARGET)
    # The orphaned code stays valid
    assert link_dao.links['Orphan'] == TARGET


# -------------------------------
# 3. Resolution
# -------------------------------


@pytest.mark.asyncio
async def test_resolve(registry):
    link = await registry.create(TARGET)
    assert await registry.resolve(link.code) == link


@pytest.mark.asyncio
async def test_resolve_unknown_code(registry):
    with pytest.raises(ShortLinkNotFoundError):
        await registry.resolve('nope42')
