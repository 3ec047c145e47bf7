from page_harness.dom.utils import count_cells, get_text_content, last_element, paste

__all__ = ['count_cells', 'get_text_content', 'last_element', 'paste']
