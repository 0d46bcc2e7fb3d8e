"""HTTP surface: batch trigger for the scheduler, registration webhook, save links."""

from flask import Flask, jsonify, request

from .config import Settings
from .errors import ConfigError, DigestError, RegistrationError
from .log import get_logger

SAVED_PAGE = """
<html>
  <head>
    <title>保存完了</title>
    <meta charset="utf-8">
  </head>
  <body>
    <h1>記事を保存しました</h1>
    <p>このページは閉じて構いません。</p>
  </body>
</html>
"""


def create_app(settings: Settings | None = None, runner_factory=None,
               registrar_factory=None, saver_factory=None) -> Flask:
    """Build the Flask app.

    The factories exist so tests can inject fakes; by default they wire the
    real providers from ``settings``.
    """
    settings = settings or Settings.from_env()
    app = Flask(__name__)
    logger = get_logger()

    if runner_factory is None:
        def runner_factory():
            from .runner import build_runner
            return build_runner(settings)

    if registrar_factory is None:
        def registrar_factory():
            from .providers.chatwork import ChatworkClient
            from .providers.qiita import QiitaSearch
            from .providers.supabase import SupabaseStore
            from .registration import Registrar
            return Registrar(
                QiitaSearch(settings.qiita_token, timeout=settings.request_timeout),
                SupabaseStore(settings.supabase_url, settings.supabase_key, timeout=settings.request_timeout),
                ChatworkClient(settings.chatwork_token, timeout=settings.request_timeout),
            )

    if saver_factory is None:
        def saver_factory():
            from .providers.chatwork import ChatworkClient
            from .providers.supabase import SupabaseStore
            from .saving import save_article
            chat = ChatworkClient(settings.chatwork_token, timeout=settings.request_timeout)
            store = SupabaseStore(settings.supabase_url, settings.supabase_key, timeout=settings.request_timeout)
            return lambda room_id, message_id: save_article(chat, store, room_id, message_id)

    @app.route("/")
    def run_batch():
        """Scheduler entry point: deliver one article to every room."""
        try:
            report = runner_factory().run()
        except ConfigError as e:
            logger.error("Batch not started: %s", e)
            return jsonify({"message": str(e)}), 500
        except DigestError as e:
            logger.error("Batch aborted: %s", e)
            return jsonify({"message": f"Batch failed: {e}"}), 500
        return jsonify({"message": "done", **report.as_dict()})

    @app.route("/register")
    def register():
        message = request.args.get("message", "")
        room_id = request.args.get("room_id", "")
        if not message or not room_id:
            return "message and room_id are required", 400
        try:
            result = registrar_factory().register(room_id, message)
        except RegistrationError as e:
            return str(e), 400
        except DigestError as e:
            logger.error("%s: registration failed: %s", room_id, e)
            return str(e), 500
        return jsonify({"registered": result.registered, "skipped": result.skipped})

    @app.route("/save", methods=["GET", "POST"])
    def save():
        room_id = request.values.get("room_id", "")
        message_id = request.values.get("message_id", "")
        if not room_id or not message_id:
            return "room_id and message_id are required", 400
        try:
            saver_factory()(room_id, message_id)
        except DigestError as e:
            logger.error("%s: save of %s failed: %s", room_id, message_id, e)
            return "保存に失敗しました", 500  # "Save failed"
        return SAVED_PAGE

    @app.route("/keepalive", methods=["HEAD", "GET"])
    def keepalive():
        return "", 200

    return app
