def normalize_widget(widget):
    return {
        "id": widget.id,
        "page_id": widget.page_id,
        "site_id": widget.site_id,
        "type": widget.type,
        "title": widget.title,
        "order": widget.order,
        "settings": widget.settings or {},
    }
