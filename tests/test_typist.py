"""
Tests for the Typist's word-by-word typing protocol.

The FakePage records every browser call, so these tests pin down the exact
sequence: navigate, wait for the input, clear it, then per word type with the
character delay, press Space and settle, then one final settle and read.
"""

import pytest

from tanglishrunner.errors import ElementNotFoundError, TransientNavigationError
from tanglishrunner.models import ConversionResult
from tanglishrunner.typist import Typist


SELECTOR = "#transliterateTextarea"


@pytest.mark.asyncio
async def test_types_word_by_word_with_space_and_settle(fast_config, fake_page):
    result = await Typist(fake_page, fast_config).type_and_extract(None, "Enaku viruppam")

    assert fake_page.events == [
        ('goto', fast_config.target_url, 'domcontentloaded', 60000),
        ('locator', SELECTOR),
        ('wait_for', SELECTOR, 'visible', 20000),
        ('click', True),
        ('fill', ''),
        ('type', 'Enaku', 60),
        ('press', 'Space'),
        ('wait', 200),
        ('type', 'viruppam', 60),
        ('press', 'Space'),
        ('wait', 200),
        ('wait', 800),
        ('input_value',),
    ]
    assert isinstance(result, ConversionResult)


@pytest.mark.asyncio
async def test_result_is_normalized_and_keeps_element(fast_config, make_page):
    page = make_page(converter=lambda typed: typed.replace("Enaku", "எனக்கு"))

    result = await Typist(page, fast_config).type_and_extract(None, "Enaku")

    assert result.raw_value == "எனக்கு "
    assert result.normalized_value == "எனக்கு"
    assert result.element is not None
    assert result.element.selector == SELECTOR


@pytest.mark.asyncio
async def test_existing_text_is_cleared_first(fast_config, fake_page):
    assert fake_page.typed == "seed text"

    result = await Typist(fake_page, fast_config).type_and_extract(None, "Seri")

    assert result.normalized_value == "Seri"


@pytest.mark.asyncio
@pytest.mark.parametrize("text, words", [
    ("Enaku    viruppam", ["Enaku", "viruppam"]),
    ("Enaku\nviruppam", ["Enaku", "viruppam"]),
    ("Enaku viruppam !!! ???", ["Enaku", "viruppam", "!!!", "???"]),
    ("12345", ["12345"]),
])
async def test_input_split_on_any_whitespace(fast_config, fake_page, text, words):
    result = await Typist(fake_page, fast_config).type_and_extract(None, text)

    assert [call[1] for call in fake_page.calls('type')] == words
    assert len(fake_page.calls('press')) == len(words)
    assert result.normalized_value == " ".join(words)


@pytest.mark.asyncio
async def test_timings_come_from_config(fast_config, fake_page):
    config = fast_config.model_copy(update={
        'inter_key_delay_ms': 5,
        'post_word_settle_ms': 7,
        'final_settle_ms': 11,
    })

    await Typist(fake_page, config).type_and_extract(None, "a b")

    assert [call[2] for call in fake_page.calls('type')] == [5, 5]
    assert fake_page.calls('wait') == [('wait', 7), ('wait', 7), ('wait', 11)]


@pytest.mark.asyncio
async def test_missing_element_fails_fast(fast_config, make_page):
    page = make_page(element_visible=False)

    with pytest.raises(ElementNotFoundError) as exc_info:
        await Typist(page, fast_config).type_and_extract(None, "Enaku")

    assert exc_info.value.selector == SELECTOR
    assert exc_info.value.timeout_ms == 20000
    # no retry, nothing typed
    assert len(page.calls('wait_for')) == 1
    assert page.calls('type') == []
    assert len(page.calls('goto')) == 1


@pytest.mark.asyncio
async def test_navigation_failure_propagates(fast_config, make_page):
    page = make_page(goto_failures=3)

    with pytest.raises(TransientNavigationError):
        await Typist(page, fast_config).type_and_extract(None, "Enaku")

    assert page.calls('locator') == []


@pytest.mark.asyncio
async def test_type_once_for_liveness(fast_config, fake_page):
    result = await Typist(fake_page, fast_config).type_once(None, "Enaku viruppam")

    assert fake_page.events[-5:] == [
        ('fill', ''),
        ('type', 'Enaku viruppam', 50),
        ('press', 'Space'),
        ('wait', 500),
        ('input_value',),
    ]
    assert result.normalized_value == "Enaku viruppam"
