# Image upload storage
import logging
import os
import time

from werkzeug.utils import secure_filename

from errors import InvalidInput

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = '/uploads/'


def save_image(file, folder):
    """Store an uploaded image and return the path it is served under."""
    if file is None or not file.filename:
        raise InvalidInput('No file uploaded')

    if not (file.mimetype or '').startswith('image/'):
        raise InvalidInput('Only image files are allowed!')

    original = secure_filename(file.filename) or 'image'
    filename = f'{int(time.time() * 1000)}-{original}'
    file.save(os.path.join(folder, filename))

    image_path = UPLOAD_URL_PREFIX + filename
    logger.info("Image uploaded: %s", image_path)
    return image_path
