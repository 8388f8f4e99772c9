"""On-disk storage for activity attachments."""
import logging
import os
import secrets
import time

from werkzeug.utils import secure_filename

from activity_tracker.errors import ValidationError
from activity_tracker.models import ActivityFile

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'jpeg', 'jpg', 'png', 'gif', 'pdf', 'doc', 'docx'}
ALLOWED_MIME_TYPES = {
    'image/jpeg',
    'image/png',
    'image/gif',
    'application/pdf',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
}


def allowed_file(filename, mime_type):
    ext = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
    return ext in ALLOWED_EXTENSIONS and mime_type in ALLOWED_MIME_TYPES


class UploadStorage:
    """Writes uploads under unique names and removes them again."""

    def __init__(self, folder, max_files=5, max_file_size=10 * 1024 * 1024):
        self.folder = folder
        self.max_files = max_files
        self.max_file_size = max_file_size

    @classmethod
    def from_config(cls, config):
        return cls(config['UPLOAD_FOLDER'], config['MAX_UPLOAD_FILES'], config['MAX_FILE_SIZE'])

    def check_count(self, files):
        if len(files) > self.max_files:
            raise ValidationError(f'At most {self.max_files} files may be attached')

    def save(self, upload):
        """Persist a werkzeug FileStorage and return its ActivityFile descriptor."""
        original_name = secure_filename(upload.filename or '')
        mime_type = (upload.mimetype or '').lower()
        if not original_name or not allowed_file(original_name, mime_type):
            raise ValidationError('Only images, PDFs, and documents are allowed')

        os.makedirs(self.folder, exist_ok=True)
        ext = os.path.splitext(original_name)[1].lower()
        stored_name = f'files-{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}{ext}'
        path = os.path.abspath(os.path.join(self.folder, stored_name))
        upload.save(path)

        size = os.path.getsize(path)
        if size > self.max_file_size:
            self.remove(path)
            raise ValidationError(f'{original_name} exceeds the {self.max_file_size // (1024 * 1024)}MB limit')

        return ActivityFile(
            name=stored_name,
            original_name=original_name,
            path=path,
            size=size,
            mime_type=mime_type,
        )

    def remove(self, path):
        """Best effort: a file already gone is not an error."""
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning('Could not remove upload %s: %s', path, exc)

    def discard(self, descriptors):
        for descriptor in descriptors:
            self.remove(descriptor.path)
