from eventify.media.validators import (
    SERVER_ALLOWED_TYPES,
    build_pathname,
    image_validation_error,
    is_blob_url,
    sanitize_filename,
)

def test_sanitize_filename_replaces_unsafe_chars_and_lowercases():
    assert sanitize_filename("My Logo (1).PNG") == "my_logo__1_.png"

def test_build_pathname_with_and_without_owner():
    assert build_pathname("vendor-images", "Logo.png", "v1") == "vendor-images/v1/logo.png"
    assert build_pathname("feedback-images", "shot.png") == "feedback-images/shot.png"

def test_image_validation_error_checks_type_then_size():
    assert "Invalid file type" in image_validation_error(10 ** 9, "text/plain", 10, SERVER_ALLOWED_TYPES)
    assert "exceeds" in image_validation_error(11, "image/png", 10, SERVER_ALLOWED_TYPES)
    assert image_validation_error(10, "image/jpg", 10, SERVER_ALLOWED_TYPES) is None

def test_is_blob_url():
    assert is_blob_url("https://abc.public.blob.vercel-storage.com/a.png")
    assert not is_blob_url("https://example.com/a.png")
    assert not is_blob_url("https://evil.example/?x=blob.vercel-storage.com")
    assert not is_blob_url("https://blob.vercel-storage.com.evil.example/a.png")
    assert not is_blob_url("ftp://abc.public.blob.vercel-storage.com/a.png")
