"""
Local File Store
Handles validation, storage and removal of uploaded lesson files.

Files live in a single flat directory (UPLOAD_FOLDER) under generated
names and are addressed by store-relative URLs like /uploads/<name>.
"""

import os
import uuid
from urllib.parse import urlparse

from flask import current_app
from moviepy import VideoFileClip

URL_PREFIX = "/uploads"

VIDEO_EXT = {".mp4", ".webm", ".mov"}
PDF_EXT = {".pdf"}
IMAGE_EXT = {".jpg", ".jpeg", ".png", ".gif"}
PPT_EXT = {".ppt", ".pptx"}
DOC_EXT = {".doc", ".docx"}
ALLOWED_EXTENSIONS = VIDEO_EXT | PDF_EXT | IMAGE_EXT | PPT_EXT | DOC_EXT


class UploadError(Exception):
    """Raised when an upload is rejected; carries the HTTP status to answer with."""

    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def file_extension(filename):
    return os.path.splitext(filename or "")[1].lower()


def allowed_file(filename, allowed_ext=ALLOWED_EXTENSIONS):
    return file_extension(filename) in allowed_ext


def classify_file(filename):
    """Map a filename to video/pdf/image/ppt/doc purely by extension."""
    ext = file_extension(filename)
    if ext in VIDEO_EXT:
        return "video"
    if ext in PDF_EXT:
        return "pdf"
    if ext in IMAGE_EXT:
        return "image"
    if ext in PPT_EXT:
        return "ppt"
    return "doc"


def normalize_file_url(file_path):
    """
    Return the store-relative URL for a persisted file path.

    Older rows stored absolute URLs (http://localhost:5000/uploads/x.mp4);
    those and bare filenames both come back as /uploads/x.mp4.
    """
    if not file_path:
        return file_path
    path = urlparse(file_path).path if "://" in file_path else file_path
    return f"{URL_PREFIX}/{os.path.basename(path)}"


def get_video_metadata(video_path):
    clip = None
    try:
        clip = VideoFileClip(video_path, audio=False)
        return round(clip.duration, 2) if clip.duration else None
    except Exception as e:
        current_app.logger.warning(f"Could not read video metadata for {video_path}: {e}")
        return None
    finally:
        if clip is not None:
            clip.close()


def _stream_size(file_obj):
    file_obj.seek(0, os.SEEK_END)
    size = file_obj.tell()
    file_obj.seek(0)
    return size


class FileStore:
    """Flat-directory store for uploaded files"""

    def __init__(self, upload_folder, max_file_size=None, max_files=None):
        self.upload_folder = upload_folder
        self.max_file_size = max_file_size
        self.max_files = max_files
        os.makedirs(self.upload_folder, exist_ok=True)

    def validate(self, files, allowed_ext=ALLOWED_EXTENSIONS):
        """
        Check every file before anything touches the disk.

        Raises:
            UploadError: 400 for too many files, empty names or a disallowed
                type; 413 for a file over the per-file ceiling.
        """
        if self.max_files is not None and len(files) > self.max_files:
            raise UploadError(f"Too many files (max {self.max_files})", 400)

        for f in files:
            if not f or not f.filename:
                raise UploadError("Malformed upload: missing filename", 400)
            if not allowed_file(f.filename, allowed_ext):
                raise UploadError(f"File type not allowed: {f.filename}", 400)
            if self.max_file_size is not None and _stream_size(f) > self.max_file_size:
                raise UploadError(f"File too large: {f.filename}", 413)

    def save(self, file_obj):
        """
        Write one uploaded file under a generated name.

        Returns:
            dict: {
                'file_path': str,      # /uploads/<generated name>
                'file_type': str,      # video/pdf/image/ppt/doc
                'original_name': str,
                'size': int,
                'duration': float|None
            }
        """
        ext = file_extension(file_obj.filename)
        filename = f"{uuid.uuid4().hex}{ext}"
        full_path = os.path.join(self.upload_folder, filename)
        file_obj.save(full_path)

        file_type = classify_file(filename)
        duration = get_video_metadata(full_path) if file_type == "video" else None

        current_app.logger.info(f"Stored upload {file_obj.filename} as {filename}")
        return {
            "file_path": f"{URL_PREFIX}/{filename}",
            "file_type": file_type,
            "original_name": file_obj.filename,
            "size": os.path.getsize(full_path),
            "duration": duration
        }

    def save_all(self, files):
        saved = []
        try:
            for f in files:
                saved.append(self.save(f))
        except OSError:
            self.delete_many(s["file_path"] for s in saved)
            raise
        return saved

    def path_for(self, file_url):
        return os.path.join(self.upload_folder, os.path.basename(normalize_file_url(file_url)))

    def exists(self, file_url):
        return bool(file_url) and os.path.isfile(self.path_for(file_url))

    def delete(self, file_url):
        """
        Remove a stored file. Best-effort: failures are logged, not raised.

        Returns:
            bool: True if a file was removed
        """
        if not file_url:
            return False
        full_path = self.path_for(file_url)
        try:
            if os.path.isfile(full_path):
                os.remove(full_path)
                current_app.logger.info(f"Deleted file from disk: {os.path.basename(full_path)}")
                return True
        except OSError as e:
            current_app.logger.error(f"Error deleting file from disk {full_path}: {e}")
        return False

    def delete_many(self, file_urls):
        return sum(1 for url in file_urls if self.delete(url))


def get_file_store():
    return FileStore(
        current_app.config["UPLOAD_FOLDER"],
        max_file_size=current_app.config.get("MAX_FILE_SIZE"),
        max_files=current_app.config.get("MAX_FILES_PER_REQUEST")
    )
