from telegram.ext import CallbackQueryHandler, MessageHandler

import main
from app.context import APP_KEY
from app.handlers import daily_prompt_job, on_callback, on_error, on_text

TOKEN = "123456:TEST-TOKEN"


def test_build_application_registers_handlers(app_ctx):
    application = main.build_application(app_ctx, TOKEN)

    assert application.bot_data[APP_KEY] is app_ctx
    handlers = application.handlers[0]
    assert [h.callback for h in handlers if isinstance(h, MessageHandler)] == [on_text]
    assert [h.callback for h in handlers if isinstance(h, CallbackQueryHandler)] == [on_callback]
    assert on_error in application.error_handlers
    assert application.concurrent_updates > 1


def test_build_application_schedules_daily_prompt(app_ctx):
    application = main.build_application(app_ctx, TOKEN)

    jobs = [job for job in application.job_queue.scheduler.get_jobs() if job.name == main.PROMPT_JOB_NAME]
    assert len(jobs) == 1
    trigger = jobs[0].trigger
    fields = {field.name: str(field) for field in trigger.fields}
    assert fields["hour"] == "9"
    assert fields["minute"] == "0"
    assert str(trigger.timezone) == "Europe/Moscow"

    ptb_jobs = application.job_queue.get_jobs_by_name(main.PROMPT_JOB_NAME)
    assert [job.callback for job in ptb_jobs] == [daily_prompt_job]
