# Artist biography scraped from Wikipedia
import logging
import re

import requests
from bs4 import BeautifulSoup

from errors import NotFound

logger = logging.getLogger(__name__)

USER_AGENT = 'WaveForm/1.0 (artist info lookup)'
NO_SUMMARY = 'Could not find a summary for this artist.'
# Shorter first paragraphs are usually disambiguation or unrelated pages
MIN_SUMMARY_LENGTH = 100
CITATION = re.compile(r'\[\d+\]')


def page_name(artist):
    return re.sub(r'\s+', '_', artist.strip())


def extract_summary(html):
    soup = BeautifulSoup(html, 'html.parser')
    paragraph = soup.select_one('.mw-parser-output > p:not(.mw-empty-elt)')
    summary = paragraph.get_text() if paragraph else ''
    summary = CITATION.sub('', summary).strip()

    if len(summary) < MIN_SUMMARY_LENGTH:
        return NO_SUMMARY
    return summary


def fetch_artist_info(artist, base_url, timeout=10):
    url = f'{base_url}{page_name(artist)}'
    try:
        response = requests.get(url, headers={'User-Agent': USER_AGENT}, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning("Scraping error for %s: %s", url, e)
        raise NotFound('Artist information not found on Wikipedia.')

    return {
        "artist": artist,
        "summary": extract_summary(response.text),
        "url": url
    }
