"""
Google Gemini API Module
========================

Generates text with Google Gemini through the Generative Language REST API.
Requires GOOGLE_GEMINI_API_KEY in the environment.
"""

import os

import requests

API_BASE = os.getenv('GEMINI_API_BASE', 'https://generativelanguage.googleapis.com/v1beta')
DEFAULT_MODEL = 'gemini-pro'
NO_RESPONSE = 'No response from Gemini.'

config = {
    'name': 'googleai',
    'description': 'Generate text using Google Gemini AI (via Google Generative AI API)',
    'params': ['prompt'],
    'usage': 'POST /api/config.googleai { "prompt": "Your question here" }',
    'methods': ['get', 'post', 'delete', 'put', 'patch'],
}


def extract_text(data):
    """First candidate's text, then a top-level text, then a placeholder"""
    try:
        text = data['candidates'][0]['content']['parts'][0]['text']
        if text:
            return text
    except (KeyError, IndexError, TypeError):
        pass
    if isinstance(data, dict) and data.get('text'):
        return data['text']
    return NO_RESPONSE


def generate_content(prompt, api_key, model=None):
    """Send one prompt to Gemini and return the parsed JSON response"""
    model = model or os.getenv('GOOGLE_GEMINI_MODEL', DEFAULT_MODEL)
    resp = requests.post(
        f"{API_BASE}/models/{model}:generateContent",
        params={'key': api_key},
        headers={'Content-Type': 'application/json'},
        json={'contents': [{'parts': [{'text': prompt}]}]},
        timeout=60,
    )
    resp.raise_for_status()
    return resp.json()


def post(params, request, response):
    api_key = os.getenv('GOOGLE_GEMINI_API_KEY')
    if not api_key:
        raise RuntimeError('Google Gemini API key not set.')
    prompt = (params or {}).get('prompt')
    if not prompt:
        raise ValueError('Prompt is required.')

    return {'result': extract_text(generate_content(prompt, api_key))}


def get(params, request, response):
    return {'usage': config['usage']}


def delete(params, request, response):
    raise NotImplementedError('DELETE not supported for this API.')


def api(params, request, response):
    return {'note': 'Fallback handler called'}


def home_page(user=None):
    return """
      <div class="widget">
        <h4>Google Gemini AI</h4>
        <form method="POST" action="/api/config.googleai" onsubmit="event.preventDefault(); googleAsk(this);">
          <input name="prompt" placeholder="Ask Google AI..." style="width:70%" required>
          <button>Ask</button>
        </form>
        <pre id="googleai-result" style="white-space:pre-wrap"></pre>
        <script>
          async function googleAsk(form) {
            const prompt = form.prompt.value;
            if (!prompt) return;
            const res = await fetch('/api/config.googleai', {
              method: 'POST',
              headers: { 'Content-Type': 'application/json' },
              body: JSON.stringify({ prompt })
            });
            const data = await res.json();
            document.getElementById('googleai-result').textContent =
              (data.result && data.result.result) || data.error || '';
          }
        </script>
      </div>
    """
