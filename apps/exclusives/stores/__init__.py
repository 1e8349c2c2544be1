from django.conf import settings
from django.utils.module_loading import import_string


def get_store():
    return import_string(settings.EXCLUSIVES_STORE)()


def get_directory():
    return import_string(settings.DIRECTORY_PROVIDER)()
