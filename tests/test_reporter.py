import io

from kcmaker.compilers.base import Asset, CompilationResult
from kcmaker.io.reporter import ResultReporter, report


def _result(**kw):
    base = dict(
        assets=[Asset("sales/customize.desktop.js", 2048)],
        modules=["src/apps/sales/desktop/index.ts"],
        chunks=["sales/customize.desktop.js"],
        elapsed=0.25,
    )
    base.update(kw)
    return CompilationResult(**base)


def test_clean_build_reports_success():
    out = io.StringIO()
    assert report(_result(), stream=out) == 0

    text = out.getvalue()
    assert "asset sales/customize.desktop.js 2.00 KiB" in text
    assert "compiled successfully in 250 ms" in text


def test_module_and_chunk_listings_are_suppressed():
    out = io.StringIO()
    ResultReporter(stream=out).report(_result())

    text = out.getvalue()
    assert "module src/apps/sales/desktop/index.ts" not in text
    assert "chunk (" not in text


def test_full_diagnostics_text_keeps_everything():
    text = _result().diagnostics_text
    assert "module src/apps/sales/desktop/index.ts" in text
    assert "chunk (sales/customize.desktop.js)" in text


def test_errors_give_failure_status_and_are_printed():
    out = io.StringIO()
    result = _result(errors=['Could not resolve "lodash"'], warnings=["unused import"])

    assert report(result, stream=out) == 1
    assert result.succeeded is False

    text = out.getvalue()
    assert 'ERROR in Could not resolve "lodash"' in text
    assert "WARNING in unused import" in text
    assert "compiled with 1 error in" in text


def test_warnings_alone_are_not_failure():
    out = io.StringIO()
    assert report(_result(warnings=["a", "b"]), stream=out) == 0
    assert "compiled with 2 warnings" in out.getvalue()


def test_colors_are_opt_in():
    plain = _result(errors=["x"]).to_string(colors=False)
    colored = _result(errors=["x"]).to_string(colors=True)
    assert "\x1b[" not in plain
    assert "\x1b[" in colored
