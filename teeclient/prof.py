"""Writing profiling data handed over by the TEE to numbered files."""

from __future__ import annotations

import os

from .teec import Result, TeecError, Uuid

MAX_FILE_ID = 100
DEFAULT_DIRECTORY = "/tmp"
_MAX_PATH = 255


def profile_path(uuid, prefix="", file_id=1, directory=DEFAULT_DIRECTORY) -> str:
    """Path of profiling file ``file_id`` for a trusted application.

    File ids 0 and 1 name the file without a suffix, id 2 adds ``.1`` and so on.
    """
    if not isinstance(uuid, Uuid):
        raise TypeError("uuid must be a Uuid")
    file_id = int(file_id)
    if not 0 <= file_id <= MAX_FILE_ID:
        raise ValueError(f"file id must be 0 to {MAX_FILE_ID}, got {file_id}")
    suffix = f".{file_id - 1}" if file_id > 1 else ""
    return os.path.join(os.fspath(directory), f"{prefix}{uuid}{suffix}.out")


def write_profile(file_id, uuid, data, prefix="", directory=DEFAULT_DIRECTORY) -> int:
    """Write ``data`` to a profiling file and return the id of the file used.

    A ``file_id`` of 0 creates a new file, taking the first free id; any other
    id appends to that existing file.
    """
    if not isinstance(uuid, Uuid) or data is None:
        raise TeecError(Result.ERROR_BAD_PARAMETERS)
    try:
        payload = memoryview(data).tobytes()
        file_id = int(file_id)
    except (TypeError, ValueError):
        raise TeecError(Result.ERROR_BAD_PARAMETERS) from None
    if not 0 <= file_id <= MAX_FILE_ID:
        raise TeecError(Result.ERROR_BAD_PARAMETERS)

    flags = os.O_APPEND | os.O_WRONLY
    if file_id == 0:
        flags |= os.O_CREAT | os.O_EXCL
        file_id = 1

    while True:
        path = profile_path(uuid, prefix, file_id, directory)
        if len(os.fsencode(path)) >= _MAX_PATH:
            break
        try:
            fd = os.open(path, flags, 0o644)
        except FileExistsError:
            if file_id == MAX_FILE_ID:
                break
            file_id += 1
            continue
        except OSError:
            break
        try:
            written = os.write(fd, payload)
        except OSError:
            written = -1
        finally:
            os.close(fd)
        if written != len(payload):
            break
        return file_id

    raise TeecError(Result.ERROR_GENERIC, message="cannot write profiling data")