"""
Chats and their message logs.

Messages are append-only. The only mutation after insert is read_at moving
from null to a timestamp, done by the recipient opening the chat, and only
where it is still null. Unread counts are always computed from rows.
"""

import logging

from django.db import transaction
from django.db.models import Count, OuterRef, Q, Subquery
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from .models import Chat, Message
from .perspectives import perspective_for
from .signals import dispatch, message_sent

logger = logging.getLogger(__name__)


def list_chats(user):
    """
    Return the user's chats, most recently active first.

    Each chat carries:
    - counterpart: the other participant
    - unread_count: counterpart messages not yet read
    - last_message / last_message_at: preview of the newest message
    """
    perspective = perspective_for(user)
    latest = Message.objects.filter(chat=OuterRef('pk')).order_by('-created_at', '-id')

    chats = list(
        Chat.objects.filter(**{perspective.own: user})
        .select_related(perspective.counterpart)
        .annotate(
            unread_count=Count(
                'messages',
                filter=Q(messages__read_at__isnull=True) & ~Q(messages__sender_id=user.id),
            ),
            last_message=Subquery(latest.values('content')[:1]),
            last_message_at=Subquery(latest.values('created_at')[:1]),
        )
        .order_by('-updated_at', '-id')
    )

    for chat in chats:
        chat.counterpart = getattr(chat, perspective.counterpart)
    return chats


def get_chat(chat_id, user):
    """
    Open a chat: return it with its messages, then mark them read.

    The returned messages show the state before the call. Every counterpart
    message that is still unread is stamped with the current time afterwards.

    Returns:
        tuple: (chat, counterpart, messages)

    Raises:
        NotFound: If the chat does not exist or the user is not a participant
    """
    chat = _participant_chat(chat_id, user)
    counterpart = chat.teacher if user.id == chat.student_id else chat.student
    messages = list(chat.messages.select_related('sender').order_by('created_at', 'id'))

    marked = (
        Message.objects.filter(chat=chat, read_at__isnull=True)
        .exclude(sender_id=user.id)
        .update(read_at=timezone.now())
    )
    if marked:
        logger.info(f"Marked {marked} message(s) read. Chat ID: {chat.id}, Reader ID: {user.id}")

    return chat, counterpart, messages


def list_messages(chat_id, user):
    """
    Return a chat's messages oldest first, without marking anything read.

    Raises:
        NotFound: If the chat does not exist or the user is not a participant
    """
    chat = _participant_chat(chat_id, user)
    return list(chat.messages.select_related('sender').order_by('created_at', 'id'))


def send_message(chat_id, sender, content):
    """
    Append a message to a chat and bump the chat's activity timestamp.

    Content is stored exactly as sent; only all-whitespace content is refused.

    Raises:
        ValidationError: If content is blank
        NotFound: If the chat does not exist or the sender is not a participant
    """
    if content is None or not str(content).strip():
        raise ValidationError({'content': ['Message content is required.']})

    with transaction.atomic():
        chat = _participant_chat(chat_id, sender)
        message = Message.objects.create(chat=chat, sender=sender, content=content)
        Chat.objects.filter(pk=chat.pk).update(updated_at=timezone.now())

    logger.info(
        f"Message sent. Message ID: {message.id}, Chat ID: {chat.id}, Sender ID: {sender.id}"
    )

    transaction.on_commit(lambda: dispatch(message_sent, sender=Message, message=message))
    return message


def _participant_chat(chat_id, user):
    try:
        return Chat.objects.select_related('student', 'teacher').get(
            Q(student=user) | Q(teacher=user),
            pk=chat_id,
        )
    except Chat.DoesNotExist:
        raise NotFound('Chat not found.')
