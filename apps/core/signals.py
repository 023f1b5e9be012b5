# apps/core/signals.py

import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Board

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Board)
def create_default_lists(sender, instance, created, raw=False, **kwargs):
    """
    Creates the default lists when a new board is created
    Only when the board has no lists yet (fixtures bring their own)
    """
    if created and not raw and not instance.lists.exists():
        instance.create_default_lists()
        logger.debug(f"📋 Default lists created for board {instance.id}")
