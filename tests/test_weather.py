"""Tests for the weather cache."""

from datetime import timedelta

from core.fancontrol.weather import WeatherCache, WeatherFetched, WeatherFetchFailed

TTL = timedelta(minutes=10)


def test_two_reads_within_ttl_fetch_once(clock, stable_fetch, stable_weather) -> None:
    cache = WeatherCache(ttl=TTL)

    first = cache.read(stable_fetch, clock())
    clock.advance(minutes=9, seconds=59)
    second = cache.read(stable_fetch, clock())

    assert stable_fetch.calls == 1
    assert first is stable_weather
    assert second is stable_weather


def test_refetch_after_ttl(clock, stable_fetch) -> None:
    cache = WeatherCache(ttl=TTL)

    cache.read(stable_fetch, clock())
    clock.advance(minutes=10)
    cache.read(stable_fetch, clock())

    assert stable_fetch.calls == 2
    assert cache.fetched_at == clock()


def test_failure_is_cached_for_ttl(clock, make_fetch, stable_weather) -> None:
    fetch = make_fetch(WeatherFetchFailed("timeout"), WeatherFetched(stable_weather))
    cache = WeatherCache(ttl=TTL)
    started = clock()

    assert cache.read(fetch, clock()) is None
    assert cache.fetched_at == started
    assert isinstance(cache.last_result, WeatherFetchFailed)

    clock.advance(minutes=5)
    assert cache.read(fetch, clock()) is None
    assert fetch.calls == 1

    clock.advance(minutes=5)
    assert cache.read(fetch, clock()) is stable_weather
    assert fetch.calls == 2


def test_failure_replaces_stale_snapshot(clock, make_fetch, stable_weather) -> None:
    fetch = make_fetch(WeatherFetched(stable_weather), WeatherFetchFailed("HTTP 500"))
    cache = WeatherCache(ttl=TTL)

    cache.read(fetch, clock())
    clock.advance(minutes=11)

    assert cache.read(fetch, clock()) is None
    assert cache.snapshot is None


def test_explicit_ttl_overrides_default(clock, stable_fetch) -> None:
    cache = WeatherCache(ttl=TTL)

    cache.read(stable_fetch, clock())
    clock.advance(minutes=2)
    cache.read(stable_fetch, clock(), ttl=timedelta(minutes=1))

    assert stable_fetch.calls == 2


def test_clear(clock, stable_fetch) -> None:
    cache = WeatherCache(ttl=TTL)
    cache.read(stable_fetch, clock())

    cache.clear()
    cache.read(stable_fetch, clock())

    assert stable_fetch.calls == 2


def test_forecast_absolute_humidity(stable_weather) -> None:
    assert stable_weather.current.absolute_humidity < stable_weather.forecast[0].absolute_humidity


def test_raising_fetch_is_cached_as_failure(clock) -> None:
    calls = []

    def broken_fetch():
        calls.append(clock())
        raise AttributeError("'list' object has no attribute 'get'")

    cache = WeatherCache(ttl=TTL)

    for _ in range(3):
        assert cache.read(broken_fetch, clock()) is None

    assert len(calls) == 1
    assert cache.fetched_at == clock()
    assert isinstance(cache.last_result, WeatherFetchFailed)
    assert "AttributeError" in cache.last_result.reason
