"""
Tests for the AlertFilter engine.

End-to-end decision scenarios replayed from real channel traffic:
location gating, deduplication across sources, urgent re-alerts,
context inference, cross-source refinement, all-clear resets,
negative-status updates and external verification.
"""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from sky_common.config import Settings
from sky_common.models import LocationConfig, Proximity, ThreatKind

from detector.alert_filter import AlertFilter, ThreatVerifier, source_id_for


# ── location gate ──


class TestLocationGate:
    """Messages must concern the observer unless configured otherwise."""

    def test_no_match_skipped(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process_titled("Канал", "баллистика на одессу") is None

    def test_matching_message_forwarded(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process_titled("Alerts", "баллистика на киев!") is not None

    @pytest.mark.parametrize(
        "text",
        [
            "12 мопедов летят к киеву",
            "баллистика на киев/васильков !!! 2 ракеты",
            "2 цілі на київ",
        ],
    )
    def test_sample_messages(self, kyiv_filter: AlertFilter, text: str) -> None:
        assert kyiv_filter.process_titled("Ch", text) is not None

    def test_forward_all_bypasses_location(self, kyiv_filter: AlertFilter) -> None:
        kyiv_filter.forward_all_threats = True
        result = kyiv_filter.process_titled(
            "monitor", "⚠️ Група ~10х БпЛА у напрямку Кілія/Ізмаїл, Одещина"
        )
        assert result is not None
        assert "Шахед" in result
        assert "Ракета" not in result

    def test_nationwide_bypasses_location(self, kharkiv_filter: AlertFilter) -> None:
        result = kharkiv_filter.process_titled(
            "Alerts",
            "‼️увага! загроза застосування балістики середньої дальності (брсд) "
            "по всій території україни. імовірний пуск ракети кедр/орєшнік (п/п рс-26). "
            "перебувайте в безпечних місцях та не ігноруйте сигнали тривоги.",
        )
        assert result is not None
        assert "Балістика" in result
        assert "ВСЯ УКРАЇНА" in result

    def test_nationwide_tag_with_city_match(self, kyiv_filter: AlertFilter) -> None:
        result = kyiv_filter.process_titled(
            "Ch1", "баллистика по всей территории украины, в том числе на киев"
        )
        assert result is not None
        assert "🟣 ВСЯ УКРАЇНА" in result

    def test_nationwide_sample(self, kyiv_filter: AlertFilter) -> None:
        msg = (
            "‼️Увага! Загроза застосування балістики середньої дальності (БРСД) "
            "по всій території України.\n"
            "\n"
            "Імовірний пуск ракети Кедр/Орєшнік (п/п РС-26).\n"
            "Перебувайте в безпечних місцях та не ігноруйте сигнали тривоги."
        )
        result = kyiv_filter.process_titled("ПС ЗСУ", msg)
        assert result is not None
        assert "Балістика" in result
        assert "Гіперзвук" in result
        assert "ВСЯ УКРАЇНА" in result

    def test_explicit_non_local_ignores_context(self, kyiv_filter: AlertFilter) -> None:
        kyiv_filter.process(700001, "Kyiv AirDefense 🌇", "Балістика на Київ")
        result = kyiv_filter.process(
            700001, "Kyiv AirDefense 🌇", "🛵 Група БпЛА на Харків з півдня."
        )
        assert result is None

    def test_real_targets_via_triggers(
        self, make_filter: Callable[..., AlertFilter], kyiv_location: LocationConfig
    ) -> None:
        for text in (
            "ціль на київ!",
            "2 цілі на захід",
            "цель на киев",
            "3 цели на днепр",
            "нова ціль",
            "ще одна ціль\nна захід",
        ):
            engine = make_filter(kyiv_location, forward_all_threats=True)
            assert engine.process(1, "Ch", text) is not None, text


# ── report filters ──


class TestReportShapes:
    """Recaps, analytical posts and negative-status updates."""

    def test_analytical_report_skipped(self, kyiv_filter: AlertFilter) -> None:
        result = kyiv_filter.process_titled(
            "Aeris Rimor",
            "Проявів з того моменту особливо помічено не було.\n"
            "Очікуваними є до 2:30. Бо в цей період крайній відрізок "
            "коли може відбутись виліт СА з Оленья, аби встигнути "
            "на пускові зони згідно поточної тактики застосування.\n"
            "Також нагадую, що у випадку атак на центр країни, ворог "
            "може починати основну фазу вже вночі.\n"
            "Пильнуємо ще щонайменше до 2 годин ночі. Але поки все "
            "відносно спокійно. Не рахуючи схід та Одещину.",
        )
        assert result is None

    def test_statistics_post_skipped(self, kyiv_filter: AlertFilter) -> None:
        msg = (
            "⚡️ ЗБИТО/ПОДАВЛЕНО 33 РАКЕТИ ТА 274 ВОРОЖИХ БПЛА\n"
            "У ніч на 22 лютого противник завдав комбінованого удару.\n"
            "Усього зафіксовано 345 засобів повітряного нападу:\n"
            "- 4 протикорабельні ракети \"Циркон\";\n"
            "- 22 балістичні ракети Іскандер-М/С-400;\n"
            "- 18 крилатих ракет Х-101;\n"
            "- 297 ударних БпЛА.\n"
            "За попередніми даними, станом на 10:00, збито/подавлено 307 цілей.\n"
            "Зафіксовано влучання на 14 локаціях.\n"
            "Інформація щодо кількох ворожих ракет уточнюється.\n"
            "✊Тримаймо небо!\n"
            "🇺🇦 Разом – до перемоги!"
        )
        assert kyiv_filter.process_titled("ПС ЗСУ", msg) is None

    def test_live_movement_not_treated_as_recap(self, kyiv_filter: AlertFilter) -> None:
        result = kyiv_filter.process_titled(
            "ПС ЗСУ", "Швидкісна ціль на Чернігівщині, курсом на Київ."
        )
        assert result is not None

    def test_negative_status_once_per_wave(
        self, make_filter: Callable[..., AlertFilter], kyiv_location: LocationConfig
    ) -> None:
        engine = make_filter(
            kyiv_location, forward_all_threats=True, negative_status_cooldown_s=0.0
        )
        engine.process_titled("monitor", "КР Циркон на Київ")

        first = engine.process_titled("monitor", "Більше не спостерігається, пролунав вибух.")
        assert first is not None
        assert "ℹ️ Статус" in first

        assert engine.process_titled("monitor", "Не фіксуються.") is None

        engine.process_titled("monitor", "Ще ракети з Криму!")
        assert engine.process_titled("monitor", "Все") is not None

    def test_negative_status_with_cautious_phrase(
        self, make_filter: Callable[..., AlertFilter], kyiv_location: LocationConfig
    ) -> None:
        engine = make_filter(
            kyiv_location, forward_all_threats=True, negative_status_cooldown_s=0.0
        )
        engine.process_titled("monitor", "Балістика на Київ")
        result = engine.process_titled(
            "monitor", "По балістиці поки чисто. Можливі повторні пуски."
        )
        assert result is not None
        assert "ℹ️ Статус" in result
        assert "‼️🚀 Балістика" not in result

    def test_negative_status_without_live_threat(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process_titled("monitor", "Не фіксуються.") is None

    def test_negative_status_needs_local_threat(self, kyiv_filter: AlertFilter) -> None:
        kyiv_filter.process_titled("monitor", "Ракети з Криму")
        assert kyiv_filter.process_titled("monitor", "Поки тихо.") is None

    def test_negative_status_cooldown(
        self, make_filter: Callable[..., AlertFilter], kyiv_location: LocationConfig, clock
    ) -> None:
        engine = make_filter(kyiv_location, negative_status_cooldown_s=120.0)
        engine.process_titled("monitor", "Балістика на Київ")
        assert engine.process_titled("monitor", "Не фіксуються.") is not None

        engine.process_titled("monitor", "Повторно балістика на Київ")
        clock.advance(60)
        assert engine.process_titled("monitor", "Поки тихо.") is None
        clock.advance(61)
        assert engine.process_titled("monitor", "Поки тихо.") is not None


# ── deduplication ──


class TestDeduplication:
    """Cross-source suppression and its bypasses."""

    def test_duplicate_suppressed(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process_titled("Ch1", "2 ракеты на киев") is not None
        assert kyiv_filter.process_titled("Ch2", "ракеты летят на киев") is None

    def test_proximity_upgrade(self, kharkiv_filter: AlertFilter) -> None:
        assert kharkiv_filter.process_titled("Ch1", "шахеди увійшли в харківську область") is not None
        assert kharkiv_filter.process_titled("Ch2", "шахеди над київським районом харкова") is not None

    def test_nationwide_after_local(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process_titled("Ch1", "баллистика на киев!") is not None
        result = kyiv_filter.process_titled("Ch2", "баллистика по всей территории украины")
        assert result is not None
        assert "ВСЯ УКРАЇНА" in result

    def test_new_secondary_threat(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process_titled("Ch1", "баллистика на киев") is not None
        result = kyiv_filter.process_titled("Ch2", "баллистика та шахеди на київ")
        assert result is not None
        assert "Балістика" in result
        assert "Шахед" in result

    def test_different_kinds_not_deduped(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process_titled("Ch1", "мопеды летят к киеву") is not None
        assert kyiv_filter.process_titled("Ch1", "баллистика на киев!") is not None

    def test_repeated_bypasses_dedup(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process_titled("Ch1", "баллистика на киев!") is not None
        result = kyiv_filter.process_titled("Ch1", "повторно баллистика на киев!")
        assert result is not None
        assert "ПОВТОРНО" in result

    @pytest.mark.parametrize(
        ("first", "second"),
        [
            ("2 ракеты на киев", "повторно 2 ракеты на киев !"),
            ("загроза балістики з брянська на київ", "додатково загроза балістики з таганрога на київ"),
            ("балістика на київ", "повторно балістика на київ!"),
        ],
    )
    def test_urgent_from_other_source(
        self, kyiv_filter: AlertFilter, first: str, second: str
    ) -> None:
        kyiv_filter.process_titled("Ch1", first)
        assert kyiv_filter.process_titled("Ch2", second) is not None

    def test_same_source_urgent_cooldown(
        self, make_filter: Callable[..., AlertFilter], kyiv_location: LocationConfig, clock
    ) -> None:
        engine = make_filter(kyiv_location, urgent_cooldown_s=0.06)
        assert engine.process_titled("Ch1", "баллистика на киев!") is not None
        assert engine.process_titled("Ch1", "повторно баллистика на киев!") is not None
        assert engine.process_titled("Ch1", "повторно баллистика на киев!") is None
        clock.advance(0.07)
        assert engine.process_titled("Ch1", "повторно баллистика на киев!") is not None

    def test_urgent_echo_scenario(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process_titled("Ch1", "баллистика на киев!") is not None
        assert kyiv_filter.process_titled("Ch2", "баллистика на киев") is None
        repeat = kyiv_filter.process_titled("Ch3", "повторно баллистика на киев!")
        assert repeat is not None
        assert "ПОВТОРНО" in repeat
        assert kyiv_filter.process_titled("Ch4", "повторно баллистика на киев!!!") is None
        assert kyiv_filter.process_titled("Ch5", "баллистика на київ/васильков") is None
        assert kyiv_filter.process_titled("Ch3", "повторно баллистика на киев!") is not None

    def test_non_urgent_after_urgent_suppressed(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process_titled("Ch1", "баллистика на киев!") is not None
        assert kyiv_filter.process_titled("Ch2", "повторно баллистика на киев!") is not None
        assert kyiv_filter.process_titled("Ch3", "баллистика на киев!") is None

    def test_urgent_proximity_upgrade(self, kharkiv_filter: AlertFilter) -> None:
        assert kharkiv_filter.process_titled("Ch1", "шахеди увійшли в харківську область") is not None
        result = kharkiv_filter.process_titled(
            "Ch2", "повторно шахеди над київським районом харкова"
        )
        assert result is not None

    def test_dedup_window_expires(self, kyiv_filter: AlertFilter, clock) -> None:
        assert kyiv_filter.process_titled("Ch1", "баллистика на киев!") is not None
        clock.advance(179)
        assert kyiv_filter.process_titled("Ch2", "баллистика на киев!") is None
        clock.advance(180)
        assert kyiv_filter.process_titled("Ch3", "баллистика на киев!") is not None

    def test_ballistic_burst(self, kyiv_filter: AlertFilter) -> None:
        inputs = [
            (1641260594, "monitor", "🟣 Загроза балістики з Північного Сходу. Брянськ."),
            (2146225839, "Київське небо 🌌", "Балістика на Київ"),
            (1779278127, "Чому тривога | Радар", "4 ракети на Київ"),
            (
                1550485924,
                "monitoring",
                "Виходи балістики з Брянської області. Київ/область — уважно.",
            ),
            (2486466109, "Kyiv AirDefense 🌇", "Швидкісні на Київ!"),
            (1641260594, "monitor", "☄ Повторний вихід у напрямку Київ"),
            (1550485924, "monitoring", "Балістика на Київ."),
        ]
        forwarded = [
            alert
            for source_id, title, text in inputs
            if (alert := kyiv_filter.process(source_id, title, text)) is not None
        ]
        assert len(forwarded) == 2
        assert any("Балістика" in a for a in forwarded)
        assert any("ПОВТОРНО" in a for a in forwarded)


# ── all-clear ──


class TestAllClear:
    """All-clear messages always pass and reset the wave."""

    def test_always_forwarded(self, kyiv_filter: AlertFilter) -> None:
        result = kyiv_filter.process_titled("Ch1", "відбій тривоги")
        assert result is not None
        assert "Відбій" in result

    def test_clears_dedup(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process_titled("Ch1", "баллистика на киев!") is not None
        assert kyiv_filter.process_titled("Ch1", "відбій тривоги") is not None
        assert kyiv_filter.process_titled("Ch1", "баллистика на киев!") is not None

    def test_clears_context(self, kyiv_filter: AlertFilter) -> None:
        kyiv_filter.process(400005, "Ch", "балістика на київ")
        cleared = kyiv_filter.process(400005, "Ch", "відбій тривоги")
        assert cleared is not None
        assert "Відбій" in cleared
        assert kyiv_filter.process(400005, "Ch", "на київ") is None

    def test_all_clear_with_threat_is_not_fast_path(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process_titled("Ch1", "відбій для шахедів, одеса") is None


# ── context inference ──


class TestContextInference:
    """Terse follow-ups borrow threat and location from recent history."""

    def test_trigger_infers_ballistic(self, kyiv_filter: AlertFilter) -> None:
        kyiv_filter.process(123456, "TestChannel", "балістична загроза з півдня")
        result = kyiv_filter.process(123456, "TestChannel", "ціль на київ")
        assert result is not None
        assert "Балістика" in result

    def test_trigger_infers_cruise(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process(789012, "TestChannel", "крилата ракета калібр на київ") is not None
        result = kyiv_filter.process(789012, "TestChannel", "2 цілі на шевченківський район")
        assert result is not None
        assert "Крилата ракета" in result

    def test_trigger_infers_shahed(self, kyiv_filter: AlertFilter) -> None:
        kyiv_filter.process(345678, "TestChannel", "шахеди в повітрі")
        result = kyiv_filter.process(345678, "TestChannel", "ще цель на київ")
        assert result is not None
        assert "Шахед" in result

    def test_contexts_are_per_source(self, kyiv_filter: AlertFilter) -> None:
        kyiv_filter.process(111111, "Channel1", "балістична ракета")
        kyiv_filter.process(222222, "Channel2", "крилата ракета")

        first = kyiv_filter.process(111111, "Channel1", "ціль на київ")
        second = kyiv_filter.process(222222, "Channel2", "ціль на київ")
        assert first is not None and "Балістика" in first
        assert second is not None and "Крилата ракета" in second

    def test_trigger_defaults_to_missile(self, kyiv_filter: AlertFilter) -> None:
        result = kyiv_filter.process(999999, "TestChannel", "ціль на київ")
        assert result is not None
        assert "Ракета" in result

    def test_location_only_infers_threat(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process(400001, "Ch", "вихід балістики") is None
        result = kyiv_filter.process(400001, "Ch", "на київ")
        assert result is not None
        assert "Балістика" in result

    def test_threat_infers_location(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process(400002, "Ch", "балістика на київ") is not None
        result = kyiv_filter.process(400002, "Ch", "крилата ракета")
        assert result is not None
        assert "Крилата ракета" in result
        assert "🟠 МІСТО" in result

    def test_urgent_infers_threat_and_location(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process(400003, "Ch", "балістика на київ") is not None
        result = kyiv_filter.process(400003, "Ch", "повторно")
        assert result is not None
        assert "ПОВТОРНО" in result
        assert "Балістика" in result

    def test_launch_trigger(
        self, make_filter: Callable[..., AlertFilter], kyiv_location: LocationConfig
    ) -> None:
        engine = make_filter(kyiv_location, forward_all_threats=True)
        engine.process(400004, "Ch", "балістична загроза")
        result = engine.process(400004, "Ch", "ще виходи на київ")
        assert result is not None
        assert "Балістика" in result

    def test_district_fallback_capped_to_city(
        self, make_filter: Callable[..., AlertFilter], kyiv_location: LocationConfig
    ) -> None:
        engine = make_filter(kyiv_location)
        engine.process(700002, "Ch", "шахеди над шевченківським районом")
        result = engine.process(700002, "Ch", "ПОВТОРНО РАКЕТИ!")
        assert result is not None
        assert "🔴 РАЙОН" not in result
        assert "🟠 МІСТО" in result

    def test_context_expires(self, kyiv_filter: AlertFilter, clock) -> None:
        assert kyiv_filter.process(400006, "Ch", "вихід балістики") is None
        clock.advance(301)
        assert kyiv_filter.process(400006, "Ch", "на київ") is None
        assert kyiv_filter.context(400006) is not None

    def test_multichannel_scenario(self, kyiv_filter: AlertFilter) -> None:
        ch1, ch2 = 500001, 500002

        assert kyiv_filter.process(ch1, "Ch1", "вихід балістики") is None
        assert kyiv_filter.process(ch2, "Ch2", "балістика брянськ") is None

        step3 = kyiv_filter.process(ch1, "Ch1", "на київ")
        assert step3 is not None
        assert "Балістика" in step3

        assert kyiv_filter.process(ch2, "Ch2", "вектором на Київ") is None
        assert kyiv_filter.process(ch1, "Ch1", "2 цілі на київ") is None

        step6 = kyiv_filter.process(ch2, "Ch2", "повторно")
        assert step6 is not None
        assert "ПОВТОРНО" in step6
        assert "Балістика" in step6

        assert kyiv_filter.process(ch1, "Ch1", "повторні виходи") is None

        step8 = kyiv_filter.process(ch2, "Ch2", "ще виходи")
        assert step8 is not None
        assert "Балістика" in step8


# ── cross-source refinement ──


class TestCrossSourceRefinement:
    """Generic rocket reports borrow the latest missile kind seen anywhere."""

    def test_generic_rocket_refined_to_ballistic(self, kyiv_filter: AlertFilter) -> None:
        assert kyiv_filter.process(900001, "Seed", "загроза балістики з брянська") is None
        result = kyiv_filter.process(900002, "Radar", "4 ракети на київ")
        assert result is not None
        assert "Балістика" in result
        assert "Ракета" not in result

    def test_not_refined_to_shahed(self, kyiv_filter: AlertFilter) -> None:
        kyiv_filter.process(910001, "Seed", "шахеди біля узина")
        result = kyiv_filter.process(910002, "Radar", "4 ракети на київ!")
        assert result is not None
        assert "Шахед" not in result

    def test_newest_missile_kind_wins(self, kyiv_filter: AlertFilter) -> None:
        kyiv_filter.process(930001, "Seed1", "балістика з брянська")
        kyiv_filter.process(930002, "Seed2", "крилаті ракети над сумщиною")
        result = kyiv_filter.process(930003, "Radar", "ракети на київ")
        assert result is not None
        assert "Крилата ракета" in result

    def test_explicit_non_local_not_refined(
        self, make_filter: Callable[..., AlertFilter], kyiv_location: LocationConfig
    ) -> None:
        engine = make_filter(kyiv_location)
        engine.process(920001, "Seed", "циркон")
        engine.process(920002, "Aeris Rimor", "на київ")
        engine.forward_all_threats = True
        result = engine.process(
            920002,
            "Aeris Rimor",
            "Залітає на Кіровоградщину.\n\nУкраїнка навколо укриття.",
        )
        assert result is not None
        assert "⚠️ Загроза" in result
        assert "Гіперзвук" not in result


# ── external verification ──


class TestProcessVerified:
    """Optional verifier consulted after the location gate."""

    @staticmethod
    def _verifier(**kwargs: object) -> AsyncMock:
        verifier = AsyncMock()
        verifier.enabled = True
        for name, value in kwargs.items():
            setattr(verifier.verify, name, value)
        return verifier

    async def test_verifier_replaces_threats(self, kyiv_filter: AlertFilter) -> None:
        verifier = self._verifier(return_value=[ThreatKind.CRUISE_MISSILE])
        result = await kyiv_filter.process_verified(1, "Ch", "2 ракети на київ", verifier)
        assert result is not None
        assert "Крилата ракета" in result
        verifier.verify.assert_awaited_once()

    async def test_verifier_updates_context(self, kyiv_filter: AlertFilter) -> None:
        verifier = self._verifier(return_value=[ThreatKind.BALLISTIC])
        await kyiv_filter.process_verified(1, "Ch", "2 ракети на київ", verifier)
        result = kyiv_filter.process(1, "Ch", "ціль на шевченківський район")
        assert result is not None
        assert "Балістика" in result

    async def test_empty_verdict_suppresses(self, kyiv_filter: AlertFilter) -> None:
        verifier = self._verifier(return_value=[])
        assert await kyiv_filter.process_verified(1, "Ch", "2 ракети на київ", verifier) is None

    async def test_verifier_error_fails_open(self, kyiv_filter: AlertFilter) -> None:
        verifier = self._verifier(side_effect=RuntimeError("boom"))
        result = await kyiv_filter.process_verified(1, "Ch", "2 ракети на київ", verifier)
        assert result is not None
        assert "Ракета" in result

    async def test_disabled_verifier_not_called(self, kyiv_filter: AlertFilter) -> None:
        verifier = self._verifier(return_value=[])
        verifier.enabled = False
        assert await kyiv_filter.process_verified(1, "Ch", "2 ракети на київ", verifier) is not None
        verifier.verify.assert_not_awaited()

    async def test_not_called_for_irrelevant_location(self, kyiv_filter: AlertFilter) -> None:
        verifier = self._verifier(return_value=[ThreatKind.BALLISTIC])
        assert await kyiv_filter.process_verified(1, "Ch", "ракети на одесу", verifier) is None
        verifier.verify.assert_not_awaited()

    async def test_not_called_for_all_clear(self, kyiv_filter: AlertFilter) -> None:
        verifier = self._verifier(return_value=[])
        assert await kyiv_filter.process_verified(1, "Ch", "відбій тривоги", verifier) is not None
        verifier.verify.assert_not_awaited()

    async def test_without_verifier(self, kyiv_filter: AlertFilter) -> None:
        assert await kyiv_filter.process_verified(1, "Ch", "балістика на київ") is not None

    async def test_plain_class_verifier(self, kyiv_filter: AlertFilter) -> None:
        class OnlyCruise:
            enabled = True

            async def verify(
                self,
                text: str,
                threats: list[ThreatKind],
                proximity: Proximity,
                nationwide: bool,
            ) -> list[ThreatKind]:
                return [ThreatKind.CRUISE_MISSILE]

            async def close(self) -> None:
                return None

        verifier = OnlyCruise()
        assert isinstance(verifier, ThreatVerifier)
        result = await kyiv_filter.process_verified(1, "Ch", "2 ракети на київ", verifier)
        assert result is not None
        assert "Крилата ракета" in result


# ── construction ──


class TestConstruction:
    """Settings wiring and source ids."""

    def test_from_settings(self) -> None:
        settings = Settings(_env_file=None, city="київ,киев", dedup_window_s=60)
        engine = AlertFilter.from_settings(settings)
        assert engine.location.city == ("київ", "киев")
        assert engine.forward_all_threats is False

    def test_from_settings_requires_location(self) -> None:
        with pytest.raises(ValueError, match="no district, city or oblast"):
            AlertFilter.from_settings(Settings(_env_file=None))

    def test_from_settings_forward_all_without_location(self) -> None:
        settings = Settings(_env_file=None, forward_all_threats=True)
        engine = AlertFilter.from_settings(settings)
        assert engine.location.is_empty

    def test_source_id_stable(self) -> None:
        assert source_id_for("Ch1") == source_id_for("Ch1")
        assert source_id_for("Ch1") != source_id_for("Ch2")

    def test_last_primary(self, kyiv_filter: AlertFilter) -> None:
        kyiv_filter.process_titled("Ch", "балістика та шахеди на київ")
        assert kyiv_filter.last_primary is ThreatKind.BALLISTIC

    def test_proximity_recorded_in_context(self, kyiv_filter: AlertFilter, clock) -> None:
        kyiv_filter.process(7, "Ch", "шахеди на київ")
        context = kyiv_filter.context(7)
        assert context is not None
        assert context.infer_location(clock.now) is Proximity.CITY
