"""
Arabic Memo Export - Streamlit Frontend

Features:
- PDF upload and text extraction through the backend
- Editable extracted text (RTL)
- Structured PDF / DOCX download
- FastAPI backend integration
"""

import streamlit as st
import httpx
from typing import Any, Dict, Optional

# Page configuration
st.set_page_config(
    page_title="بوابة استخراج المستندات | PDF Extraction Portal",
    page_icon="📄",
    layout="centered",
    initial_sidebar_state="collapsed"
)

# Custom CSS for RTL and Arabic styling
st.markdown("""
<style>
    /* Import Arabic font */
    @import url('https://fonts.googleapis.com/css2?family=Noto+Naskh+Arabic:wght@400;700&display=swap');
    
    /* Global RTL support */
    .main {
        direction: rtl;
        text-align: right;
        font-family: 'Noto Naskh Arabic', serif;
    }
    
    /* Title styling */
    .main-title {
        text-align: center;
        color: #059669;
        font-size: 2.2rem;
        font-weight: 700;
        margin-bottom: 0.5rem;
    }
    
    .subtitle {
        text-align: center;
        color: #64748b;
        font-size: 1.05rem;
        margin-bottom: 2rem;
    }
    
    /* Extracted text */
    .stTextArea textarea {
        direction: rtl;
        text-align: right;
        font-family: 'Noto Naskh Arabic', serif;
        font-size: 1rem;
        line-height: 1.8;
    }
    
    /* Buttons */
    .stButton > button, .stDownloadButton > button {
        background: linear-gradient(135deg, #10b981 0%, #059669 100%);
        color: white;
        border: none;
        border-radius: 10px;
        padding: 0.5rem 2rem;
        font-weight: 600;
    }
    
    /* Error message */
    .error-message {
        background: #ffebee;
        color: #c62828;
        padding: 1rem;
        border-radius: 10px;
        border-right: 4px solid #c62828;
        margin: 1rem 0;
    }
    
    /* Hide Streamlit branding */
    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
</style>
""", unsafe_allow_html=True)

# API configuration
API_BASE_URL = "http://localhost:8000"

DOWNLOAD_FORMATS = {
    "pdf": "تنزيل PDF",
    "docx": "تنزيل DOCX",
}
MIME_TYPES = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
FILENAMES = {
    "pdf": "مذكرة-تفاهم.pdf",
    "docx": "result.docx",
}
# Line-by-line export without parsing
RAW_FILENAMES = {
    "pdf": "result.pdf",
    "docx": "result.docx",
}


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("message") or f"خطأ في الخادم: {response.status_code}"
    except ValueError:
        return f"خطأ في الخادم: {response.status_code}"


def call_extract_api(name: str, content: bytes) -> Dict[str, Any]:
    """
    Upload a PDF to the backend /extract endpoint.
    
    Returns:
        {"success": True, "text": ...} or {"success": False, "error": ...}
    """
    try:
        response = httpx.post(
            f"{API_BASE_URL}/extract",
            files={"file": (name, content, "application/pdf")},
            timeout=None
        )
        if response.status_code == 200:
            return {"success": True, "text": response.json()["text"]}
        return {"success": False, "error": _error_message(response)}
    except httpx.ConnectError:
        return {
            "success": False,
            "error": "تعذر الاتصال بالخادم. تأكد من تشغيل API على المنفذ 8000."
        }
    except httpx.HTTPError as e:
        return {"success": False, "error": f"حدث خطأ: {str(e)}"}


def download_name(fmt: str, raw: bool = False) -> str:
    return (RAW_FILENAMES if raw else FILENAMES)[fmt]


def call_render_api(text: str, fmt: str, raw: bool = False) -> Optional[bytes]:
    """Render text through /render; shows the error and returns None on failure."""
    try:
        response = httpx.post(
            f"{API_BASE_URL}/render",
            json={"text": text, "format": fmt, "raw": raw},
            timeout=120.0
        )
    except httpx.HTTPError as e:
        st.markdown(f'<div class="error-message">⚠️ حدث خطأ: {e}</div>', unsafe_allow_html=True)
        return None
    
    if response.status_code != 200:
        st.markdown(f'<div class="error-message">⚠️ {_error_message(response)}</div>',
                    unsafe_allow_html=True)
        return None
    return response.content


def main():
    """Main application."""
    
    # Header
    st.markdown('<h1 class="main-title">📄 بوابة استخراج المستندات</h1>', unsafe_allow_html=True)
    st.markdown('<p class="subtitle">ارفع ملف PDF لاستخراج النص وتصديره كمذكرة منسقة</p>',
                unsafe_allow_html=True)
    
    if "result_text" not in st.session_state:
        st.session_state.result_text = ""
    
    uploaded = st.file_uploader("ملف PDF", type=["pdf"], label_visibility="collapsed")
    
    if st.button("استخراج النص", use_container_width=True, disabled=uploaded is None):
        with st.spinner("⏳ جاري الاستخراج..."):
            result = call_extract_api(uploaded.name, uploaded.getvalue())
        if result["success"]:
            st.session_state.result_text = result["text"]
            st.success("تم الاستخراج بنجاح")
        else:
            st.markdown(f'<div class="error-message">⚠️ {result["error"]}</div>',
                        unsafe_allow_html=True)
    
    if not st.session_state.result_text:
        return
    
    text = st.text_area("النص المستخرج", st.session_state.result_text, height=320)
    
    fmt = st.radio(
        "صيغة التنزيل",
        options=list(DOWNLOAD_FORMATS),
        format_func=DOWNLOAD_FORMATS.get,
        horizontal=True
    )
    raw = st.checkbox("تصدير النص كما هو (سطراً بسطر دون تنسيق)", key="raw")
    
    if st.button("تجهيز الملف", key="render", use_container_width=True):
        if not text.strip():
            st.markdown('<div class="error-message">⚠️ لا يوجد نص للتصدير</div>',
                        unsafe_allow_html=True)
            return
        with st.spinner("⏳ جاري إنشاء الملف..."):
            data = call_render_api(text, fmt, raw)
        if data is not None:
            st.download_button(
                DOWNLOAD_FORMATS[fmt],
                data=data,
                file_name=download_name(fmt, raw),
                mime=MIME_TYPES[fmt],
                use_container_width=True
            )


if __name__ == "__main__":
    main()
