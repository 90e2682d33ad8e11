from __future__ import annotations

from loguru import logger

from mailgate.application.folder_tree import flatten
from mailgate.application.ports.mail_sessions import SessionFactory
from mailgate.domain.entities.connection import ConnectionTarget, Credentials
from mailgate.domain.entities.folder import FolderNode


class ListFoldersUseCase:
    def __init__(self, sessions: SessionFactory) -> None:
        self.sessions = sessions

    def run(self, credentials: Credentials, target: ConnectionTarget) -> list[FolderNode]:
        with self.sessions.open_imap(credentials, target) as session:
            tree = session.list_tree()

        folders = flatten(tree)
        logger.info(f"Listed {len(folders)} folders on {target}")
        return folders
