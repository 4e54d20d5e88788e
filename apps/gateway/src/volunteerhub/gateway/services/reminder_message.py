"""提醒邮件渲染

正文必须包含志愿者姓名、任务标题、活动日期、地点和描述；
具体措辞属于展示层，可以调整。
"""

from volunteerhub.core.models import TaskSignup

_BODY_TEMPLATE = """\
Dear {name},

Thank you for volunteering with us! This is a friendly reminder about your task tomorrow:

Task Title: {title}
Date: {event_date}
Location: {location}
Description: {description}

We appreciate your commitment to making a difference.
If you have any questions, feel free to contact us.

Warm regards,
The Volunteer Platform Team
"""


def render_reminder(signup: TaskSignup) -> tuple[str, str]:
    """渲染提醒邮件

    Returns:
        (subject, body)
    """
    task = signup.task
    subject = f"Reminder: Upcoming Volunteer Task - {task.title}"
    body = _BODY_TEMPLATE.format(
        name=signup.volunteer.name,
        title=task.title,
        event_date=task.event_date.isoformat() if task.event_date else "TBD",
        location=task.location,
        description=task.description,
    )
    return subject, body
