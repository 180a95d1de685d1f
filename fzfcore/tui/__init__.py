"""Terminal events, borders, colours, input decoding, tty access and the light renderer."""