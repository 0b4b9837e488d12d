"""Templates and static file generation."""

from pathlib import Path

# Template content
BASE_HTML = """<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>{{ title or 'Image Upload' }}</title>
  <link rel="stylesheet" href="/static/app.css">
</head>
<body>
  <header class="topbar">
    <nav>
      <a href="/" class="brand">🖼️ Image Upload</a>
      <span class="muted">Up to {{ max_files }} images per upload, {{ max_file_size_label }} each</span>
    </nav>
  </header>
  <main class="container">
    {% block content %}{% endblock %}
  </main>
  <div id="notification" class="notification" role="status" hidden></div>
  {% block scripts %}{% endblock %}
</body>
</html>
"""

INDEX_HTML = """{% extends 'base.html' %}
{% block content %}
<section class="upload">
  <div id="dropZone" class="drop-zone" tabindex="0">
    <p>Drag &amp; drop images here</p>
    <p class="muted">or</p>
    <button type="button" id="browseBtn">Browse files</button>
    <input type="file" id="fileInput" accept="image/*" multiple hidden>
  </div>

  <div id="previewSection" class="preview-section" hidden>
    <div class="preview-header">
      <h2>Selected <span id="selectionCount" class="muted"></span></h2>
      <div class="actions">
        <button type="button" id="clearBtn">Clear</button>
        <button type="button" id="uploadBtn" class="primary">Upload</button>
      </div>
    </div>
    <div id="previewContainer" class="preview-grid"></div>
    <div id="uploadProgress" class="progress" hidden>
      <div class="progress-bar"><div id="progressFill" class="progress-fill"></div></div>
      <span id="progressText" class="muted"></span>
    </div>
  </div>
</section>

<section class="gallery-section">
  <div class="gallery-header">
    <h2>Gallery <span id="imageCount" class="muted"></span></h2>
    <button type="button" id="refreshBtn">Refresh</button>
  </div>
  <div id="gallery" class="grid"></div>
</section>

<div id="imageModal" class="modal" hidden>
  <div class="modal-content">
    <button type="button" class="close" title="Close">×</button>
    <img id="modalImage" alt="" />
    <div class="modal-footer">
      <span id="modalFilename" class="fn"></span>
      <button type="button" id="deleteBtn" class="danger">Delete</button>
    </div>
  </div>
</div>
{% endblock %}

{% block scripts %}
<script>
  window.UPLOAD_CONFIG = {
    maxFiles: {{ max_files }},
    maxFileSize: {{ max_file_size }},
    uploadField: {{ upload_field | tojson }},
    groupField: {{ group_field | tojson }}
  };
</script>
<script src="/static/app.js"></script>
{% endblock %}
"""

APP_CSS = """:root{--bg:#0f1115;--fg:#e5e7eb;--muted:#a1a1aa;--card:#111318;--chip:#2a2e37;--brand:#7aa2ff;--danger:#ff5c5c;--ok:#10b981}
*{box-sizing:border-box}body{margin:0;background:var(--bg);color:var(--fg);font:15px/1.45 system-ui,-apple-system,Segoe UI,Roboto,Inter,Ubuntu,Helvetica,Arial}
[hidden]{display:none!important}
a{color:var(--brand);text-decoration:none}.muted{color:var(--muted)}
.topbar{position:sticky;top:0;background:#0c0e13;border-bottom:1px solid #1c1f26;z-index:10}
.topbar nav{margin:auto;display:flex;gap:14px;align-items:center;padding:10px}
.topbar .brand{font-weight:700}
.container{margin:20px auto;padding:0 14px;max-width:1200px}
button{cursor:pointer;background:#1e2635;border:1px solid #2f3748;color:var(--fg);padding:6px 12px;border-radius:8px}
button:disabled{opacity:.5;cursor:default}
button.primary{background:var(--brand);border-color:var(--brand);color:#0b0d12;font-weight:600}
button.danger{background:#3a1313;border-color:#5b1a1a;color:#ffd5d5}
.drop-zone{border:2px dashed #2f3748;border-radius:12px;padding:36px;text-align:center;background:var(--card);cursor:pointer;transition:border-color .2s,background .2s}
.drop-zone.drag-over{border-color:var(--brand);background:#141a26}
.preview-section{margin-top:18px}
.preview-header,.gallery-header{display:flex;align-items:center;justify-content:space-between;gap:12px}
.actions{display:flex;gap:8px}
.preview-grid{display:grid;grid-template-columns:repeat(auto-fill,minmax(120px,1fr));gap:10px}
.preview-item{position:relative;background:var(--card);border:1px solid #1f2430;border-radius:8px;overflow:hidden}
.preview-item img{width:100%;height:110px;object-fit:cover;display:block;background:#090a0d}
.preview-item .remove-btn{position:absolute;top:4px;right:4px;padding:0 7px;border-radius:999px;background:rgba(0,0,0,.7)}
.preview-item .file-info{padding:4px 6px;font-size:12px;color:var(--muted);white-space:nowrap;overflow:hidden;text-overflow:ellipsis}
.progress{display:flex;align-items:center;gap:10px;margin-top:12px}
.progress-bar{flex:1;height:10px;background:#1a1d24;border-radius:999px;overflow:hidden}
.progress-fill{height:100%;width:0;background:var(--brand);transition:width .2s}
.progress-bar.indeterminate .progress-fill{width:30%;animation:slide 1.2s linear infinite}
@keyframes slide{from{transform:translateX(-100%)}to{transform:translateX(340%)}}
.gallery-section{margin-top:28px}
.grid{display:grid;grid-template-columns:repeat(auto-fill,minmax(180px,1fr));gap:14px}
.gallery-item{position:relative;background:var(--card);border:1px solid #1f2430;border-radius:12px;overflow:hidden;cursor:pointer}
.gallery-item img{width:100%;height:180px;object-fit:cover;display:block;background:#090a0d}
.gallery-item .overlay{position:absolute;left:0;right:0;bottom:0;padding:6px 8px;background:linear-gradient(transparent,rgba(0,0,0,.8))}
.fn{white-space:nowrap;overflow:hidden;text-overflow:ellipsis;font-size:13px}
.modal{position:fixed;inset:0;background:rgba(0,0,0,.8);display:flex;align-items:center;justify-content:center;z-index:20}
.modal-content{position:relative;background:var(--card);border:1px solid #1f2430;border-radius:12px;padding:14px;max-width:90vw;max-height:90vh;display:flex;flex-direction:column;gap:10px}
.modal-content img{max-width:100%;max-height:75vh;object-fit:contain;border-radius:8px}
.modal-content .close{position:absolute;top:8px;right:8px;border-radius:999px}
.modal-footer{display:flex;align-items:center;justify-content:space-between;gap:12px}
.notification{position:fixed;right:18px;bottom:18px;padding:10px 14px;border-radius:10px;border:1px solid;z-index:30}
.notification.success{background:#0f2e1e;border-color:var(--ok);color:#34d399}
.notification.error{background:#2d1b1b;border-color:#ef4444;color:#f87171}
"""

APP_JS = r"""(function () {
  'use strict';

  const config = window.UPLOAD_CONFIG || {maxFiles: 10, maxFileSize: 10 * 1024 * 1024, uploadField: 'images', groupField: 'hash'};
  const $ = (id) => document.getElementById(id);

  function formatFileSize(bytes) {
    if (bytes === 0) return '0 Bytes';
    const k = 1024;
    const sizes = ['Bytes', 'KB', 'MB', 'GB'];
    const i = Math.min(Math.floor(Math.log(bytes) / Math.log(k)), sizes.length - 1);
    return parseFloat((bytes / Math.pow(k, i)).toFixed(2)) + ' ' + sizes[i];
  }

  function errorMessage(payload, fallback) {
    return (payload && typeof payload.error === 'string' && payload.error) || fallback;
  }

  // Grouping token for this browser, kept across reloads
  function groupToken() {
    let token = localStorage.getItem('uploadGroup');
    if (!token) {
      token = (crypto.randomUUID ? crypto.randomUUID() : String(Date.now()) + Math.random().toString(16).slice(2)).replace(/[^A-Za-z0-9-]/g, '');
      localStorage.setItem('uploadGroup', token);
    }
    return token;
  }

  class Notifier {
    constructor(el) {
      this.el = el;
      this.timer = null;
    }

    show(message, type = 'success') {
      clearTimeout(this.timer);
      this.el.textContent = message;
      this.el.className = `notification ${type}`;
      this.el.hidden = false;
      this.timer = setTimeout(() => { this.el.hidden = true; }, 4000);
    }
  }

  class UploadController {
    constructor(notifier, onUploaded) {
      this.notifier = notifier;
      this.onUploaded = onUploaded;
      // id -> File, in insertion order
      this.selection = new Map();
      this.nextId = 1;
      this.uploading = false;

      this.dropZone = $('dropZone');
      this.fileInput = $('fileInput');
      this.browseBtn = $('browseBtn');
      this.previewSection = $('previewSection');
      this.previewContainer = $('previewContainer');
      this.selectionCount = $('selectionCount');
      this.uploadBtn = $('uploadBtn');
      this.clearBtn = $('clearBtn');
      this.uploadProgress = $('uploadProgress');
      this.progressBar = this.uploadProgress.querySelector('.progress-bar');
      this.progressFill = $('progressFill');
      this.progressText = $('progressText');

      this.dropZone.addEventListener('dragover', (e) => { e.preventDefault(); this.dropZone.classList.add('drag-over'); });
      this.dropZone.addEventListener('dragleave', (e) => { e.preventDefault(); this.dropZone.classList.remove('drag-over'); });
      this.dropZone.addEventListener('drop', (e) => {
        e.preventDefault();
        this.dropZone.classList.remove('drag-over');
        this.addFiles(Array.from(e.dataTransfer.files));
      });
      this.dropZone.addEventListener('click', (e) => {
        if (e.target !== this.browseBtn) this.fileInput.click();
      });
      this.browseBtn.addEventListener('click', () => this.fileInput.click());
      this.fileInput.addEventListener('change', (e) => {
        this.addFiles(Array.from(e.target.files));
        this.fileInput.value = '';
      });
      this.uploadBtn.addEventListener('click', () => this.upload());
      this.clearBtn.addEventListener('click', () => this.clear());
    }

    addFiles(files) {
      if (this.uploading) return;
      const images = files.filter((file) => file.type.startsWith('image/'));
      if (images.length === 0) {
        this.notifier.show('Please select only image files', 'error');
        return;
      }
      const tooLarge = images.filter((file) => file.size > config.maxFileSize);
      if (tooLarge.length) {
        this.notifier.show(`${tooLarge.length} file(s) exceed ${formatFileSize(config.maxFileSize)} and were skipped`, 'error');
      }
      images.filter((file) => file.size <= config.maxFileSize).forEach((file) => {
        const id = String(this.nextId++);
        this.selection.set(id, file);
        this.renderPreview(id, file);
      });
      this.updateSection();
    }

    renderPreview(id, file) {
      const item = document.createElement('div');
      item.className = 'preview-item';
      item.dataset.id = id;

      const img = document.createElement('img');
      img.alt = file.name;
      const reader = new FileReader();
      reader.onload = (e) => {
        // Removed while the preview was still decoding
        if (this.selection.has(id)) img.src = e.target.result;
      };
      reader.readAsDataURL(file);

      const removeBtn = document.createElement('button');
      removeBtn.type = 'button';
      removeBtn.className = 'remove-btn';
      removeBtn.textContent = '×';
      removeBtn.title = 'Remove';
      removeBtn.addEventListener('click', () => this.remove(id));

      const info = document.createElement('div');
      info.className = 'file-info';
      info.textContent = `${file.name} · ${formatFileSize(file.size)}`;

      item.append(img, removeBtn, info);
      this.previewContainer.appendChild(item);
    }

    remove(id) {
      if (this.uploading) return;
      this.selection.delete(id);
      const item = this.previewContainer.querySelector(`[data-id="${id}"]`);
      if (item) item.remove();
      this.updateSection();
    }

    clear() {
      if (this.uploading) return;
      this.selection.clear();
      this.previewContainer.innerHTML = '';
      this.updateSection();
    }

    updateSection() {
      const count = this.selection.size;
      this.previewSection.hidden = count === 0;
      this.selectionCount.textContent = `${count} file(s)`;
      this.uploadBtn.disabled = this.uploading || count === 0 || count > config.maxFiles;
      if (count > config.maxFiles) {
        this.notifier.show(`At most ${config.maxFiles} files per upload`, 'error');
      }
    }

    setProgress(event) {
      if (event.lengthComputable) {
        this.progressBar.classList.remove('indeterminate');
        const percent = Math.round((event.loaded / event.total) * 100);
        this.progressFill.style.width = percent + '%';
        this.progressText.textContent = percent + '%';
      } else {
        this.progressBar.classList.add('indeterminate');
        this.progressText.textContent = formatFileSize(event.loaded);
      }
    }

    setUploading(active) {
      this.uploading = active;
      this.clearBtn.disabled = active;
      this.uploadProgress.hidden = !active;
      if (active) {
        this.progressBar.classList.add('indeterminate');
        this.progressFill.style.width = '0%';
        this.progressText.textContent = '';
      }
      this.updateSection();
    }

    send(formData) {
      return new Promise((resolve, reject) => {
        const xhr = new XMLHttpRequest();
        xhr.open('POST', '/upload');
        xhr.responseType = 'json';
        xhr.upload.addEventListener('progress', (e) => this.setProgress(e));
        xhr.upload.addEventListener('load', () => {
          // Bytes are sent; the server is still writing thumbnails
          this.progressBar.classList.add('indeterminate');
          this.progressText.textContent = 'Processing…';
        });
        xhr.addEventListener('load', () => resolve({ok: xhr.status >= 200 && xhr.status < 300, payload: xhr.response}));
        xhr.addEventListener('error', () => reject(new Error('Network error')));
        xhr.addEventListener('abort', () => reject(new Error('Upload aborted')));
        xhr.send(formData);
      });
    }

    async upload() {
      if (this.uploading) return;
      if (this.selection.size === 0) {
        this.notifier.show('Please select files to upload', 'error');
        return;
      }
      const formData = new FormData();
      this.selection.forEach((file) => formData.append(config.uploadField, file));
      formData.append(config.groupField, groupToken());

      this.setUploading(true);
      try {
        const {ok, payload} = await this.send(formData);
        if (ok && payload && payload.success) {
          let message = payload.message;
          if (payload.rejected && payload.rejected.length) {
            message += `, ${payload.rejected.length} rejected`;
          }
          const failed = (payload.files || []).filter((f) => f.thumbnail_error).length;
          if (failed) message += `, ${failed} without thumbnail`;
          this.notifier.show(message, 'success');
          this.setUploading(false);
          this.clear();
          this.onUploaded();
        } else {
          this.setUploading(false);
          this.notifier.show(errorMessage(payload, 'Upload failed'), 'error');
        }
      } catch (error) {
        console.error('Upload error:', error);
        this.setUploading(false);
        this.notifier.show('Upload failed: ' + error.message, 'error');
      }
    }
  }

  class GalleryController {
    constructor(notifier) {
      this.notifier = notifier;
      this.current = null;

      this.gallery = $('gallery');
      this.imageCount = $('imageCount');
      this.refreshBtn = $('refreshBtn');
      this.modal = $('imageModal');
      this.modalImage = $('modalImage');
      this.modalFilename = $('modalFilename');
      this.deleteBtn = $('deleteBtn');
      this.closeBtn = this.modal.querySelector('.close');

      this.refreshBtn.addEventListener('click', () => this.load());
      this.closeBtn.addEventListener('click', () => this.close());
      this.modal.addEventListener('click', (e) => {
        if (e.target === this.modal) this.close();
      });
      this.deleteBtn.addEventListener('click', () => this.deleteCurrent());
      document.addEventListener('keydown', (e) => {
        if (e.key === 'Escape') this.close();
      });
    }

    async load() {
      try {
        const response = await fetch('/api/images');
        const data = await response.json().catch(() => null);
        if (!response.ok || !data || !Array.isArray(data.images)) {
          throw new Error(errorMessage(data, 'Failed to load gallery'));
        }
        this.render(data.images);
      } catch (error) {
        console.error('Error loading gallery:', error);
        this.notifier.show(error.message || 'Failed to load gallery', 'error');
      }
    }

    render(images) {
      this.gallery.innerHTML = '';
      this.imageCount.textContent = `${images.length} images`;
      images.forEach((image) => {
        const tile = document.createElement('div');
        tile.className = 'gallery-item';
        tile.addEventListener('click', () => this.open(image));

        const img = document.createElement('img');
        img.loading = 'lazy';
        img.alt = image.filename;
        img.src = image.thumbnail_path || image.upload_path;
        img.addEventListener('error', () => {
          if (img.src !== new URL(image.upload_path, location.href).href) img.src = image.upload_path;
        });

        const overlay = document.createElement('div');
        overlay.className = 'overlay';
        const name = document.createElement('div');
        name.className = 'fn';
        name.textContent = image.filename;
        overlay.appendChild(name);

        tile.append(img, overlay);
        this.gallery.appendChild(tile);
      });
    }

    open(image) {
      this.current = image;
      this.modalImage.src = image.upload_path;
      this.modalImage.alt = image.filename;
      this.modalFilename.textContent = image.filename;
      this.modal.hidden = false;
      document.body.style.overflow = 'hidden';
    }

    close() {
      if (this.modal.hidden) return;
      this.modal.hidden = true;
      this.modalImage.removeAttribute('src');
      document.body.style.overflow = '';
      this.current = null;
    }

    async deleteCurrent() {
      const image = this.current;
      if (!image) return;
      if (!confirm(`Are you sure you want to delete ${image.filename}?`)) return;
      try {
        const response = await fetch(`/api/images/${encodeURIComponent(image.filename)}`, {method: 'DELETE'});
        const result = await response.json().catch(() => null);
        if (response.ok && result && result.success) {
          this.notifier.show(result.message || 'Image deleted successfully', 'success');
          this.close();
          this.load();
        } else {
          this.notifier.show(errorMessage(result, 'Failed to delete image'), 'error');
        }
      } catch (error) {
        console.error('Delete error:', error);
        this.notifier.show('Failed to delete image', 'error');
      }
    }
  }

  document.addEventListener('DOMContentLoaded', () => {
    const notifier = new Notifier($('notification'));
    const gallery = new GalleryController(notifier);
    new UploadController(notifier, () => gallery.load());
    gallery.load();
  });
})();
"""


def ensure_assets() -> None:
    """Create templates/static on first run so this file is standalone."""
    APP_DIR = Path(__file__).resolve().parent
    TEMPLATES_DIR = APP_DIR / "templates"
    STATIC_DIR = APP_DIR / "static"

    TEMPLATES_DIR.mkdir(parents=True, exist_ok=True)
    STATIC_DIR.mkdir(parents=True, exist_ok=True)
    files = {
        TEMPLATES_DIR / "base.html": BASE_HTML,
        TEMPLATES_DIR / "index.html": INDEX_HTML,
        STATIC_DIR / "app.css": APP_CSS,
        STATIC_DIR / "app.js": APP_JS,
    }
    for p, content in files.items():
        if not p.exists():
            p.write_text(content, encoding="utf-8")
