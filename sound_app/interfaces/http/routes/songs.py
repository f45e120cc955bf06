"""Song upload, listing, editing and removal."""

from __future__ import annotations

import logging
import os
import tempfile

from flask import Blueprint, current_app, jsonify, request, send_file
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from sound_app.domain.songs import (
    InvalidFilenameError,
    InvalidTrackNumberError,
    SongNotFoundError,
    SongService,
    StorageCollisionError,
)
from sound_app.models.dto import Song, SongChanges, Upload


logger = logging.getLogger(__name__)

songs_bp = Blueprint('songs_bp', __name__, url_prefix='/api/songs')


def get_song_service() -> SongService:
    return current_app.extensions['song_service']


def get_storage_root() -> str:
    return current_app.config['SONG_STORAGE_DIR']


def _error(code: str, message: str, status: int):
    return jsonify({'error': code, 'message': message}), status


def _serialize(song: Song) -> dict:
    return song.model_dump()


def _song_or_404(song_id: int):
    song = get_song_service().get_by_id(song_id)
    if song is None:
        return None, _error('not_found', f'Song {song_id} not found', 404)
    return song, None


@songs_bp.errorhandler(SQLAlchemyError)
def _database_error(e):
    logger.error("Database error while handling %s: %s", request.path, e, exc_info=True)
    return _error('database_error', 'The song database could not complete the request.', 500)


@songs_bp.route('', methods=['GET'])
def list_songs():
    songs = get_song_service().list_all()
    return jsonify([_serialize(song) for song in songs]), 200


@songs_bp.route('/<int:song_id>', methods=['GET'])
def get_song(song_id: int):
    song, error = _song_or_404(song_id)
    if error:
        return error
    return jsonify(_serialize(song)), 200


@songs_bp.route('/<int:song_id>/file', methods=['GET'])
def download_song_file(song_id: int):
    song, error = _song_or_404(song_id)
    if error:
        return error
    service = get_song_service()
    try:
        path = service.file_store.resolve(get_storage_root(), song.file)
    except InvalidFilenameError as e:
        return _error('invalid_filename', e.message, 400)
    if not os.path.isfile(path):
        return _error('file_missing', f'Stored file for song {song_id} is missing', 409)
    return send_file(path, as_attachment=True, download_name=os.path.basename(path))


@songs_bp.route('', methods=['POST'])
def upload_song():
    uploaded = request.files.get('file')
    if uploaded is None or not uploaded.filename:
        return _error('file_required', 'A multipart field named "file" is required.', 400)

    logger.info("Received song upload: %s", uploaded.filename)
    fd, temp_path = tempfile.mkstemp(prefix='upload-', suffix='.part')
    os.close(fd)
    try:
        uploaded.save(temp_path)
        upload = Upload(tempfile=temp_path, filename=uploaded.filename)
        song = get_song_service().create(get_storage_root(), upload)
    except InvalidTrackNumberError as e:
        logger.warning("Rejected upload %s: %s", uploaded.filename, e)
        return _error('invalid_track_number', e.message, 422)
    except InvalidFilenameError as e:
        return _error('invalid_filename', e.message, 400)
    except StorageCollisionError as e:
        return _error('file_exists', e.message, 409)
    except OSError as e:
        logger.error("Could not store upload %s: %s", uploaded.filename, e, exc_info=True)
        return _error('storage_error', 'The uploaded file could not be stored.', 500)
    finally:
        if os.path.exists(temp_path):
            os.remove(temp_path)

    return jsonify(_serialize(song)), 201


@songs_bp.route('/<int:song_id>', methods=['PATCH', 'PUT'])
def update_song(song_id: int):
    song, error = _song_or_404(song_id)
    if error:
        return error
    try:
        changes = SongChanges.model_validate(request.get_json(silent=True) or {})
    except ValidationError as e:
        return jsonify({'error': 'invalid_payload', 'message': 'Invalid song fields.', 'details': e.errors(include_url=False, include_context=False)}), 400

    try:
        updated = get_song_service().update(song, changes)
    except SongNotFoundError as e:
        return _error('not_found', e.message, 404)
    return jsonify(_serialize(updated)), 200


@songs_bp.route('/<int:song_id>', methods=['DELETE'])
def delete_song(song_id: int):
    song, error = _song_or_404(song_id)
    if error:
        return error
    try:
        get_song_service().delete(get_storage_root(), song)
    except SongNotFoundError as e:
        return _error('not_found', e.message, 404)
    except InvalidFilenameError as e:
        return _error('invalid_filename', e.message, 400)
    except FileNotFoundError:
        logger.warning("Song %s kept: its file %s is already missing", song_id, song.file)
        return _error('file_missing', f'Stored file for song {song_id} is missing; record kept.', 409)
    except OSError as e:
        logger.error("Could not remove file for song %s: %s", song_id, e, exc_info=True)
        return _error('storage_error', 'The stored file could not be removed.', 500)
    return jsonify({'deleted': True, 'id': song_id}), 200


__all__ = ['songs_bp']
