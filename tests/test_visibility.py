"""Testes do sinal de visibilidade da página."""

from progress_tracker.application.refresh.visibility import PageVisibility


def test_notifies_only_on_change():
    visibility = PageVisibility()
    seen = []
    visibility.subscribe(seen.append)

    visibility.set_visible(True)
    visibility.set_visible(False)
    visibility.set_visible(False)
    visibility.set_visible(True)
    assert seen == [False, True]


def test_unsubscribe_and_error_isolation():
    visibility = PageVisibility()
    seen = []

    def boom(_):
        raise RuntimeError("falhou")

    visibility.subscribe(boom)
    unsubscribe = visibility.subscribe(seen.append)
    visibility.set_visible(False)
    assert seen == [False]

    unsubscribe()
    visibility.set_visible(True)
    assert seen == [False]
    assert visibility.listener_count == 1
