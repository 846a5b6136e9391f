## routes.py
from __future__ import annotations

from datetime import datetime
from functools import wraps
from io import BytesIO
from types import SimpleNamespace

from flask import (
    Blueprint,
    abort,
    current_app,
    jsonify,
    redirect,
    render_template,
    request,
    send_file,
    session,
    url_for,
)

from pct_web.domain.errors import AuthError, ComparisonBusyError, ExportError, ValidationError
from pct_web.domain.models import DEFAULT_SECTIONS, ComparisonSettings, Product
from pct_web.renderers import EXPORT_FORMATS, export
from pct_web.services.form_validation import ensure_valid
from pct_web.services.prompt_builder import (
    FORMAT_LABELS,
    LAYOUT_LABELS,
    TONE_LABELS,
    merge_sections,
)
from pct_web.services.session_gate import DRAFT_KEY, SESSION_EXPIRED_MESSAGE
from pct_web.web import forms


def _safe_int(raw: str | None) -> int | None:
    raw = (raw or "").strip()
    if not raw.isascii() or not raw.isdigit():
        return None
    return int(raw)


def _options(labels: dict) -> list[SimpleNamespace]:
    return [SimpleNamespace(value=k.value, label=v) for k, v in labels.items()]


def create_blueprint(comparison_service, session_gate, url_normalizer, settings, preset_repo=None) -> Blueprint:
    bp = Blueprint("web", __name__)

    def current_user():
        return session_gate.current_user(session)

    def page_login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if current_user() is None:
                return redirect(url_for("web.index"))
            return view(*args, **kwargs)
        return wrapper

    def api_login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if current_user() is None:
                return jsonify({"error": "Authentication required."}), 401
            return view(*args, **kwargs)
        return wrapper

    def load_presets() -> list[SimpleNamespace]:
        if preset_repo is None:
            return []
        return [SimpleNamespace(id=p.preset_id, name=p.display_label) for p in preset_repo.get_active_presets()]

    def save_draft(product_a: Product, product_b: Product, cmp_settings: ComparisonSettings) -> None:
        draft, clipped = forms.to_draft(product_a, product_b, cmp_settings)
        if clipped:
            current_app.logger.warning("Draft for %s clipped to fit the session cookie", current_user().id)
        session[DRAFT_KEY] = draft

    def restore_draft():
        draft = session.get(DRAFT_KEY)
        if not isinstance(draft, dict):
            return None
        return forms.inputs_from_json(draft, url_normalizer, settings.prompt_verbosity)

    def render_form(product_a, product_b, cmp_settings, *, code=200, **extra):
        presets = []
        error = extra.pop("error", None)
        try:
            presets = load_presets()
        except Exception as e:
            current_app.logger.exception("Failed to load presets from SQL Server")
            error = error or f"Failed to load presets from SQL Server: {e}"

        page_model = dict(
            user=current_user(),
            presets=presets,
            presets_enabled=preset_repo is not None,
            preset_id=None,
            product_a=product_a,
            product_b=product_b,
            settings=cmp_settings,
            default_sections=DEFAULT_SECTIONS,
            tone_options=_options(TONE_LABELS),
            format_options=_options(FORMAT_LABELS),
            layout_options=_options(LAYOUT_LABELS),
            section_count=len(merge_sections(cmp_settings)),
            errors={},
            record=None,
            error=error,
            session_check_seconds=settings.session_check_seconds,
        )
        page_model.update(extra)
        return render_template("index.html", **page_model), code

    @bp.get("/")
    def index():
        user = current_user()
        if user is None:
            return render_template(
                "login.html",
                google_client_id=settings.google_client_id,
                auth_error=request.args.get("auth_error"),
            )

        product_a, product_b = Product(), Product()
        cmp_settings = ComparisonSettings(verbosity=settings.prompt_verbosity)
        error = None

        draft = restore_draft()
        if draft is not None:
            product_a, product_b, cmp_settings = draft

        preset_id = _safe_int(request.args.get("preset_id"))
        if preset_id is not None and preset_repo is not None:
            try:
                p = preset_repo.get_preset(preset_id)
            except Exception as e:
                current_app.logger.exception("Failed to load preset %s", preset_id)
                p, error = None, f"Failed to load preset from SQL Server: {e}"
            if p is None and error is None:
                error = f"Preset id {preset_id} not found or inactive."
            elif p is not None:
                product_a, product_b = p.product_a, p.product_b
                cmp_settings = ComparisonSettings(
                    tone=p.settings.tone,
                    format=p.settings.format,
                    layout=p.settings.layout,
                    sections=p.settings.sections,
                    custom_sections=p.settings.custom_sections,
                    verbosity=settings.prompt_verbosity,
                )

        body, code = render_form(product_a, product_b, cmp_settings, error=error, preset_id=preset_id)
        return body, code

    def _form_inputs():
        product_a, product_b = forms.products_from_form(request.form, url_normalizer)
        cmp_settings = forms.settings_from_form(request.form, settings.prompt_verbosity)
        return product_a, product_b, cmp_settings

    @bp.post("/generate")
    @page_login_required
    def generate():
        product_a, product_b, cmp_settings = _form_inputs()
        save_draft(product_a, product_b, cmp_settings)

        try:
            ensure_valid(product_a, product_b, cmp_settings)
        except ValidationError as e:
            return render_form(product_a, product_b, cmp_settings, code=400, errors=e.errors)

        record = comparison_service.compose(current_user().id, product_a, product_b, cmp_settings)
        current_app.logger.info("Composed prompt %s (%d chars)", record.run_id, len(record.composed.prompt))
        return render_form(product_a, product_b, cmp_settings, record=record)

    @bp.post("/run")
    @page_login_required
    def run_comparison():
        product_a, product_b, cmp_settings = _form_inputs()
        save_draft(product_a, product_b, cmp_settings)

        try:
            ensure_valid(product_a, product_b, cmp_settings)
        except ValidationError as e:
            return render_form(product_a, product_b, cmp_settings, code=400, errors=e.errors)

        owner = current_user().id
        record = comparison_service.compose(owner, product_a, product_b, cmp_settings)
        try:
            result = comparison_service.run(owner, record)
        except ComparisonBusyError as e:
            return render_form(product_a, product_b, cmp_settings, code=409, record=record, error=str(e))

        code = 200 if result.status == "ok" else 500
        current_app.logger.info("Run %s status=%s duration=%ss", result.run_id, result.status, result.duration_seconds)

        return render_template(
            "result.html",
            user=current_user(),
            record=record,
            result=result,
            session_check_seconds=settings.session_check_seconds,
        ), code

    @bp.post("/reset")
    @page_login_required
    def reset():
        session.pop(DRAFT_KEY, None)
        return redirect(url_for("web.index"))

    @bp.get("/download/<run_id>/<fmt>")
    @page_login_required
    def download(run_id: str, fmt: str):
        if fmt not in EXPORT_FORMATS:
            abort(404)
        record = comparison_service.result_repo.get(run_id, current_user().id)
        if record is None:
            abort(404)

        try:
            out = export(record, fmt, datetime.now())
        except ExportError as e:
            current_app.logger.exception("Export %s/%s failed", run_id, fmt)
            return render_template("error.html", message=str(e)), 500

        return send_file(BytesIO(out.data), mimetype=out.mimetype, as_attachment=True, download_name=out.filename)

    # ---------------- JSON API ----------------

    @bp.post("/api/auth/google")
    def auth_google():
        payload = request.get_json(silent=True) or {}
        try:
            user = session_gate.login(session, str(payload.get("credential") or ""))
        except AuthError as e:
            return jsonify({"success": False, "error": str(e)}), e.status_code
        session.permanent = True
        current_app.logger.info("User %s signed in", user.id)
        return jsonify({"success": True, "user": user.to_dict()})

    @bp.get("/api/auth/session")
    def auth_session():
        user = current_user()
        if user is None:
            return jsonify({"isAuthenticated": False, "message": SESSION_EXPIRED_MESSAGE})
        return jsonify({"isAuthenticated": True, "user": user.to_dict()})

    @bp.post("/api/auth/logout")
    def auth_logout():
        session_gate.logout(session)
        return jsonify({"success": True})

    @bp.post("/api/compose")
    @api_login_required
    def api_compose():
        product_a, product_b, cmp_settings = forms.inputs_from_json(
            request.get_json(silent=True), url_normalizer, settings.prompt_verbosity
        )
        try:
            ensure_valid(product_a, product_b, cmp_settings)
        except ValidationError as e:
            return jsonify({"errors": e.errors}), 400

        record = comparison_service.compose(current_user().id, product_a, product_b, cmp_settings)
        return jsonify({
            "runId": record.run_id,
            "prompt": record.composed.prompt,
            "preview": record.composed.preview,
            "sectionCount": len(merge_sections(cmp_settings)),
        })

    @bp.post("/api/compare")
    @api_login_required
    def api_compare():
        payload = request.get_json(silent=True) or {}
        prompt = payload.get("prompt") if isinstance(payload, dict) else None
        if not isinstance(prompt, str) or not prompt.strip():
            return jsonify({"error": "Prompt is required."}), 400

        try:
            result = comparison_service.submit_prompt(current_user().id, prompt)
        except ComparisonBusyError as e:
            return jsonify({"error": str(e)}), 409

        if result.status != "ok":
            return jsonify({"error": result.error}), 500
        return jsonify({"result": result.content})

    @bp.put("/api/draft")
    @api_login_required
    def api_draft():
        product_a, product_b, cmp_settings = forms.inputs_from_json(
            request.get_json(silent=True), url_normalizer, settings.prompt_verbosity
        )
        save_draft(product_a, product_b, cmp_settings)
        return jsonify({"saved": True})

    return bp
