from abc import ABC, abstractmethod


class BaseDirectory(ABC):
    @abstractmethod
    def resolve_member(self, member_id):
        """
        Returns CompanyIdentity | JournalistIdentity, or None when the
        member does not exist.
        """
        raise NotImplementedError

    @abstractmethod
    def searchable_journalists(self, beat_tags):
        """
        Returns list of JournalistCandidate for searchable journalists with
        at least one beat category in beat_tags.
        """
        raise NotImplementedError
